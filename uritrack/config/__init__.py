# uritrack/config/__init__.py
