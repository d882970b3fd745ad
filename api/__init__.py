"""api/ -- FastAPI application, HTTP models and routes for Simpan.

Layer rule: api/ is the outermost layer. It imports from auth/, core/, foods/
and mail/; nothing imports from api/ except asgi.py and the tests.
"""
