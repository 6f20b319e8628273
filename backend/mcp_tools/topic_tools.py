"""
ITopic tools.
"""

from typing import Any, Dict

from .common import call_store, check_access, deny, encode


async def topic_publish(topic_name: str, message: Any) -> str:
    """Publish a message (any JSON) to a Hazelcast Topic."""
    denied = check_access("topic", topic_name, "publish", write=True)
    if denied:
        return await deny("topic_publish", denied)

    def _op(client: Any) -> Dict[str, Any]:
        client.get_topic(topic_name).blocking().publish(encode(message))
        return {"topic": topic_name, "message": f"Published message to topic '{topic_name}'"}

    return await call_store("topic_publish", _op)


async def topic_info(topic_name: str) -> str:
    """
    Describe a Hazelcast Topic.

    Local topic statistics live on members only, so the client reports
    whether the topic exists on the cluster.
    """
    denied = check_access("topic", topic_name, "get")
    if denied:
        return await deny("topic_info", denied)

    def _op(client: Any) -> Dict[str, Any]:
        exists = any(
            obj.name == topic_name and obj.service_name == "hz:impl:topicService"
            for obj in client.get_distributed_objects()
        )
        return {
            "topic": topic_name,
            "exists": exists,
            "stats": "Local topic stats not available on client",
        }

    return await call_store("topic_info", _op)


TOOLS = [topic_publish, topic_info]
