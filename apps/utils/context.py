# utils/context.py

"""
Thread-local actor context.

BaseModel.save() reads the acting user from here to fill created_by_id and
updated_by_id; services read it to name the actor in audit log lines.
Management commands and batch jobs wrap their work in ActorContext.
"""

from threading import local
import logging

logger = logging.getLogger(__name__)

_thread_locals = local()


def set_request_context(user=None, source=None):
    """
    Set the acting user for this thread.

    Args:
        user: The authenticated user (anonymous users are stored as None)
        source: Short label of where the work comes from ('web', 'command', ...)
    """
    if user is not None and not getattr(user, 'is_authenticated', False):
        user = None

    _thread_locals.request_context = {
        'user': user,
        'source': source or '',
    }
    logger.debug(f"Set request context: user={user}, source={source}")


def get_request_context():
    """Current context dict, or None when nothing was set"""
    return getattr(_thread_locals, 'request_context', None)


def clear_request_context():
    if hasattr(_thread_locals, 'request_context'):
        delattr(_thread_locals, 'request_context')
        logger.debug("Cleared request context")


def get_actor_label():
    """Human readable actor for audit lines: username, 'system' or the source"""
    context = get_request_context()
    if not context:
        return 'system'
    user = context.get('user')
    if user is not None:
        return getattr(user, 'username', None) or str(user.pk)
    return context.get('source') or 'system'


# ============================================================================
# CONTEXT MANAGER
# ============================================================================

class ActorContext:
    """
    Temporarily set the actor context, restoring the previous one on exit.

    Example:
        with ActorContext(source='command'):
            FinalResultService.generate_final_results(school_class, year)
    """

    def __init__(self, user=None, source=None):
        self.user = user
        self.source = source
        self.previous_context = None

    def __enter__(self):
        self.previous_context = get_request_context()
        set_request_context(user=self.user, source=self.source)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.previous_context:
            _thread_locals.request_context = self.previous_context
        else:
            clear_request_context()
