"""Actor context and credential helpers."""
from .context import ActorContext, require_super
from .service import hash_password, verify_password, authenticate_admin, find_learner

__all__ = [
    'ActorContext',
    'require_super',
    'hash_password',
    'verify_password',
    'authenticate_admin',
    'find_learner',
]
