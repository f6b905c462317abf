from .asgi import ASGIBodyWriter, StaticASGI, asgi  # NOQA: F401

# EOF
