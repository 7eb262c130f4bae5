"""Progress publisher for pub/sub event publishing."""

import logging
from pubsub import pub
from ..models.events import ProgressEvent

logger = logging.getLogger(__name__)

PROGRESS_TOPIC = "recorder.progress"


class ProgressPublisher:
    """Publishes recording progress events using pubsub.pub."""

    def __init__(self, topic: str = PROGRESS_TOPIC):
        """Initialize progress publisher.

        Args:
            topic: Pub/sub topic name for progress events
        """
        self.topic = topic
        logger.info(f"ProgressPublisher initialized with topic: {topic}")

    def publish_progress(self, event: ProgressEvent) -> None:
        """Publish a progress event to the pub/sub topic.

        Args:
            event: ProgressEvent to publish
        """
        pub.sendMessage(self.topic, event=event)
