"""Business logic services for the Linkboard application.

Import from the submodules directly; the repositories layer imports
``services.change_feed`` and ``services.errors``, so this package must not
import anything that depends on repositories.
"""
