"""
Service manifest validation.

Validates Kubernetes Service manifests against a JSON Schema and converts
them into Service objects.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from jsonschema import Draft7Validator, SchemaError

from service import Service, ServicePort

logger = logging.getLogger(__name__)

PORT_SCHEMA = {"type": "integer", "minimum": 1, "maximum": 65535}

SERVICE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["metadata", "spec"],
    "properties": {
        "metadata": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "namespace": {"type": "string"},
                "uid": {"type": "string"},
            },
        },
        "spec": {
            "type": "object",
            "properties": {
                "ports": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["port"],
                        "properties": {
                            "name": {"type": "string"},
                            "protocol": {"type": "string"},
                            "port": PORT_SCHEMA,
                            "nodePort": PORT_SCHEMA,
                        },
                    },
                },
            },
        },
    },
}


def validate_service_manifest(
    manifest: Dict[str, Any], schema: Optional[Dict[str, Any]] = None
) -> Tuple[bool, Optional[str]]:
    """
    Validate a Service manifest.

    Args:
        manifest: The decoded manifest
        schema: Schema to validate against, defaults to SERVICE_SCHEMA

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        schema = schema or SERVICE_SCHEMA
        Draft7Validator.check_schema(schema)
        validator = Draft7Validator(schema)
        errors = list(validator.iter_errors(manifest))

        if not errors:
            return True, None

        # Collect all validation errors
        error_messages = []
        for error in errors:
            path = ".".join(str(p) for p in error.absolute_path) or "(root)"
            error_messages.append(f"{path}: {error.message}")

        return False, "; ".join(error_messages)

    except SchemaError as e:
        return False, f"Invalid schema: {e.message}"


def service_from_manifest(manifest: Dict[str, Any]) -> Service:
    """
    Build a Service from a validated manifest.

    Ports without a nodePort get node port 0.
    """
    metadata = manifest["metadata"]
    ports = [
        ServicePort(
            port=port["port"],
            node_port=port.get("nodePort", 0),
            name=port.get("name"),
            protocol=port.get("protocol", "TCP"),
        )
        for port in (manifest.get("spec") or {}).get("ports") or []
    ]

    return Service(
        name=metadata["name"],
        namespace=metadata.get("namespace") or "default",
        uid=metadata.get("uid", ""),
        ports=ports,
    )
