"""
Consul Service Discovery Module

Service registration with an HTTP health check, KV configuration lookup and
service discovery for microservices.
"""

import consul
import json
import logging
import os
import socket
from typing import Optional, List, Dict, Any

logger = logging.getLogger(__name__)


class ConsulRegistry:
    """
    Consul registration, KV and discovery client

    KV keys are namespaced by service name: ``<service_name>/<key>``.
    """

    def __init__(
        self,
        service_name: str,
        consul_host: str = "localhost",
        consul_port: int = 8500,
        service_port: Optional[int] = None,
        service_host: Optional[str] = None,
        tags: Optional[List[str]] = None,
        meta: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Consul client

        Args:
            service_name: Name of the calling service (KV namespace)
            consul_host: Consul server host
            consul_port: Consul server port
            service_port: Port the service listens on (required for register)
            service_host: Address advertised to Consul (hostname if unset)
            tags: Service tags
            meta: Service metadata (values must be strings)
        """
        self.consul = consul.Consul(host=consul_host, port=consul_port)
        self.service_name = service_name
        self.service_port = service_port
        if service_host and service_host != "0.0.0.0":
            self.service_host = service_host
        else:
            self.service_host = os.getenv('HOSTNAME', socket.gethostname())
        self.service_id = f"{service_name}-{self.service_host}-{service_port}"
        self.tags = tags or []
        self.meta = meta or {}
        logger.info(f"Consul client initialized: {consul_host}:{consul_port}")

    # Registration Methods
    def register(self) -> bool:
        """Register the service with an HTTP check on /health"""
        if not self.service_port:
            logger.warning("Cannot register with Consul without a service port")
            return False
        try:
            self.consul.agent.service.register(
                name=self.service_name,
                service_id=self.service_id,
                address=self.service_host,
                port=self.service_port,
                tags=self.tags,
                meta=self.meta,
                check=consul.Check.http(
                    f"http://{self.service_host}:{self.service_port}/health",
                    interval="15s",
                    timeout="5s",
                    deregister="1m",
                ),
            )
            logger.info(f"Registered {self.service_id} with Consul")
            return True
        except Exception as e:
            logger.error(f"Failed to register {self.service_id}: {e}")
            return False

    def deregister(self) -> bool:
        try:
            self.consul.agent.service.deregister(self.service_id)
            logger.info(f"Deregistered {self.service_id} from Consul")
            return True
        except Exception as e:
            logger.error(f"Failed to deregister {self.service_id}: {e}")
            return False

    # Configuration Management Methods
    def get_config(self, key: str, default: Any = None) -> Any:
        """Get configuration value from Consul KV store"""
        try:
            full_key = f"{self.service_name}/{key}"
            index, data = self.consul.kv.get(full_key)
            if data and data.get('Value'):
                value = data['Value'].decode('utf-8')
                # Try to parse as JSON
                try:
                    return json.loads(value)
                except json.JSONDecodeError:
                    return value
            return default
        except Exception as e:
            logger.error(f"Failed to get config {key}: {e}")
            return default

    # Service Discovery Methods
    def discover_service(self, service_name: str) -> List[Dict[str, Any]]:
        """Discover healthy instances of a service"""
        try:
            index, services = self.consul.health.service(service_name, passing=True)

            instances = []
            for service in services:
                instance = {
                    'id': service['Service']['ID'],
                    'address': service['Service']['Address'],
                    'port': service['Service']['Port'],
                    'tags': service['Service'].get('Tags', []),
                }
                instances.append(instance)

            return instances
        except Exception as e:
            logger.error(f"Failed to discover service {service_name}: {e}")
            return []

    def get_service_endpoint(self, service_name: str) -> Optional[str]:
        """Get the first healthy endpoint of a service"""
        instances = self.discover_service(service_name)
        if not instances:
            return None
        instance = instances[0]
        return f"http://{instance['address']}:{instance['port']}"
