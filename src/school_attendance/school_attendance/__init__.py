"""School Attendance package.

This package is organized by feature modules (directory, attendance, scanning,
payments, ...) with a thin Flask controller layer and service/repository layers.
"""
