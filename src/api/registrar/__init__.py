"""Registrar bounded context.

Students, courses, enrollments, payments and grades. Every table here is
tenant-scoped; the row filter keeps each organization's records to itself.
"""
