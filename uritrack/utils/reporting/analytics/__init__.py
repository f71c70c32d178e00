# uritrack/utils/reporting/analytics/__init__.py
