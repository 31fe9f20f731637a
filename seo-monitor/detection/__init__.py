from detection.models import (
    ChangeType,
    Change,
    ContentChange,
    RobotsTxtChange,
    FieldChange,
    NavChange,
    NavLink,
    NavTextChange,
)
from detection.navigation import NavLocator, extract_nav, diff_nav
from detection.engine import VersionComparator, compare
