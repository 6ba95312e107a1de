"""Test runner used by ``manage.py test``."""

import os

from django.test.runner import DiscoverRunner


class NonInteractiveDiscoverRunner(DiscoverRunner):
    """Run without prompts so CI can clobber leftover test databases.

    Setting ``DMS_TEST_KEEPDB=1`` reuses the PostgreSQL test database between
    runs, which saves the migration time on the dashboard's many apps.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.interactive = False
        if os.environ.get("DMS_TEST_KEEPDB") == "1":
            self.keepdb = True
