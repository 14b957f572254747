from .record_activity import RecordActivity
from .dtos import UsageEventDTO, AccessEventDTO

__all__ = ["RecordActivity", "UsageEventDTO", "AccessEventDTO"]
