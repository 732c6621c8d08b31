"""Class Attendance package.

Organized by feature modules (users, classes, attendance, resources, policy)
with a thin Flask controller layer over service/repository layers.
"""
