from newsdesk.scheduler.publisher import ScheduledPublisher

__all__ = ["ScheduledPublisher"]
