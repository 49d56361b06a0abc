import json
import logging
import os
from typing import Any

SYNTHESIZED_GRAPH_FILE = "cdk.tf.json"


def load_synthesized_graph(stack_dir: str) -> dict[str, Any]:
    """Load the synthesized terraform JSON of a stack.

    A missing or unreadable file yields an empty graph, so that every
    resource kind is reported as not declared.
    """
    path = os.path.join(stack_dir, SYNTHESIZED_GRAPH_FILE)
    try:
        with open(path, encoding="utf-8") as f:
            graph = json.load(f)
    except FileNotFoundError:
        logging.warning(f"synthesized graph not found: {path}")
        return {}
    except (OSError, json.JSONDecodeError) as e:
        logging.error(f"unable to read synthesized graph {path}: {e}")
        return {}
    if not isinstance(graph, dict):
        logging.error(f"unexpected synthesized graph content in {path}")
        return {}
    return graph


def _metadata_path(node: Any) -> str | None:
    if not isinstance(node, dict):
        return None
    path = ((node.get("//") or {}).get("metadata") or {}).get("path")
    return path if isinstance(path, str) else None


def find_resource_key(
    graph: dict[str, Any], resource_type: str, metadata_suffix: str | None = None
) -> str | None:
    """Return the local key of the declared resource of resource_type.

    The first node whose construct path ends with metadata_suffix wins,
    otherwise the first node of that type.
    """
    nodes = (graph.get("resource") or {}).get(resource_type)
    if not isinstance(nodes, dict) or not nodes:
        return None
    if metadata_suffix:
        for key, node in nodes.items():
            path = _metadata_path(node)
            if path is not None and path.endswith(metadata_suffix):
                return key
    return next(iter(nodes))
