"""pyhttpmod - HTTP module with cookie handling for plugin based applications.

Features:
- Cookie value type supporting Netscape (version 0) and RFC 2109 (version 1) cookies
- SameSite, Priority and HttpOnly attributes
- Set-Cookie serialization with a fixed attribute order, and parsing of Set-Cookie and Cookie headers
- Percent escaping of cookie values
- Thread-safe, domain and path aware cookie store
- Connections executed by a pluggable transport, with JSON response callbacks
- Explicit module registration and JSON settings deployment
- Mocking and testing utilities
"""

__version__ = "0.1.0"
