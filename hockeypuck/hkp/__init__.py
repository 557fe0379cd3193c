"""HTTP Keyserver Protocol: settings, request parsing, page templates and WSGI routing."""