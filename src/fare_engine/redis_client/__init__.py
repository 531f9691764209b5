from .publisher import RedisPublisher

__all__ = ["RedisPublisher"]
