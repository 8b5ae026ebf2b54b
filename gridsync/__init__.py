"""Grid edit synchronization: selection, editing, optimistic saves and staged rows."""

from gridsync.bridge import GridBridge
from gridsync.engine import EditSyncEngine
from gridsync.ledger import PendingSave, PendingSaveLedger, ledger_key

__all__ = ["EditSyncEngine", "GridBridge", "PendingSave", "PendingSaveLedger", "ledger_key"]
