# uritrack/utils/__init__.py
