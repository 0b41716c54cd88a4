from .metrics import ReplicationMetrics, export_textfile

__all__ = ['ReplicationMetrics', 'export_textfile']
