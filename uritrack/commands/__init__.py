# uritrack/commands/__init__.py
