"""Course Periods package.

Configures course period times per term and resolves the effective time
window of a course occurrence from prioritized conditional rules.
Organized by feature modules (terms, periods, ...) with a thin Flask
controller layer over service/repository layers.
"""
