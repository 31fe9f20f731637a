from snapshots.models import PageSnapshot
from snapshots.parser import parse
from snapshots.storage import SnapshotStore
