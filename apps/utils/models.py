# utils/models.py

"""
Base model for school-specific data.

Every school table gets a UUID primary key, timestamps in the school's
operational timezone, the id of the user who created/updated the row (taken
from the thread-local request context) and automatic routing to the current
school database.
"""

from django.db import models
from schoolhub.managers import get_current_db, SchoolManager
import uuid
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# BASE MODEL - SCHOOL-SPECIFIC DATA
# =============================================================================

class BaseModel(models.Model):
    """
    Abstract base for all school data.

    Timestamps are written in the school timezone by save(); rows created
    through QuerySet.bulk_create() skip save() and must not be used for
    BaseModel subclasses.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    created_at = models.DateTimeField(
        "Created At",
        db_index=True,
        editable=False,
        help_text="When this record was created (in school's operational timezone)"
    )
    updated_at = models.DateTimeField(
        "Updated At",
        db_index=True,
        editable=False,
        help_text="When this record was last updated (in school's operational timezone)"
    )

    # CharField to avoid cross-database FK constraints
    created_by_id = models.CharField(
        "Created By ID",
        max_length=50,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID of user who created this record"
    )
    updated_by_id = models.CharField(
        "Updated By ID",
        max_length=50,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID of user who last updated this record"
    )

    change_reason = models.CharField(
        "Change Reason",
        max_length=255,
        blank=True,
        null=True,
        help_text="Explanation for why this change was made"
    )

    objects = SchoolManager()

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        """
        Set school-timezone timestamps, fill the audit user fields from the
        request context and route the write to the current school database.
        """
        from utils.context import get_request_context
        from utils.utils import get_school_current_time

        is_new = self._state.adding
        now = get_school_current_time()

        if is_new:
            if not self.created_at:
                self.created_at = now
            if not self.updated_at:
                self.updated_at = now
        else:
            self.updated_at = now
            update_fields = kwargs.get('update_fields')
            if update_fields is not None and 'updated_at' not in update_fields:
                kwargs['update_fields'] = list(update_fields) + ['updated_at']

        context = get_request_context()
        if context and context.get('user'):
            user_id = str(context['user'].id)
            if is_new and not self.created_by_id:
                self.created_by_id = user_id
            self.updated_by_id = user_id
        elif is_new:
            logger.debug(
                f"No request context available when creating {self.__class__.__name__}. "
                f"Audit fields will not be populated."
            )

        current_db = get_current_db()
        if current_db and 'using' not in kwargs:
            kwargs['using'] = current_db

        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Route deletes to the current school database"""
        current_db = get_current_db()

        if current_db and 'using' not in kwargs:
            kwargs['using'] = current_db
            logger.debug(f"Deleting {self.__class__.__name__} from {current_db}")

        return super().delete(*args, **kwargs)

    def refresh_from_db(self, *args, **kwargs):
        """Override refresh to automatically route to correct database"""
        current_db = get_current_db()

        if current_db and 'using' not in kwargs:
            kwargs['using'] = current_db

        return super().refresh_from_db(*args, **kwargs)

    def get_audit_trail(self):
        """Audit information for this record (timestamps in school timezone)"""
        return {
            'id': str(self.id),
            'created_at': self.created_at,
            'created_by_id': self.created_by_id,
            'updated_at': self.updated_at,
            'updated_by_id': self.updated_by_id,
            'last_change_reason': self.change_reason,
        }
