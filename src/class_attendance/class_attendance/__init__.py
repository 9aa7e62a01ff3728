"""Class attendance package.

Feature modules (roster, attendance, reports) with SOLID service/repository
layers and a thin Flask controller layer on top.
"""
