"""
Operator scripts for database maintenance.
"""
