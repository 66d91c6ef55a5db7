"""Bundled resource adapters; importing this package registers them."""

from .administrators import Administrator as Administrator
from .administrators import AdministratorReader as AdministratorReader
from .system_users import SystemUsers as SystemUsers
from .system_users import SystemUserState as SystemUserState
from .user_groups import UserGroupLookup as UserGroupLookup
from .user_groups import UserGroups as UserGroups
from .user_groups import UserGroupState as UserGroupState
