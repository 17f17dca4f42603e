"""View decorators running the authorization guard before the view body.

The resolved Actor is passed to the view as the ``actor`` keyword argument; views have no
other way to obtain one, so nothing can be read or written before authorization.
"""
from functools import wraps
from couponops.services.guard import current_guard


def require_authenticated():
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            kwargs['actor'] = current_guard().require_authenticated()
            return fn(*args, **kwargs)
        return wrapper
    return outer


def require_capability(capability: str):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            kwargs['actor'] = current_guard().require_capability(capability)
            return fn(*args, **kwargs)
        return wrapper
    return outer
