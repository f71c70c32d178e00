# uritrack/utils/reporting/__init__.py
