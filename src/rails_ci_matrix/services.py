"""Backing-service definitions for GitHub Actions ``services:`` blocks.

Each job carries its bundle as one JSON string; the workflow passes it
through ``fromJSON`` to the container runtime untouched.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

MYSQL_DEFAULT_IMAGE = "mysql:latest"
POSTGRES_DEFAULT_IMAGE = "postgres:alpine"
REDIS_DEFAULT_IMAGE = "redis:alpine"
MEMCACHED_IMAGE = "memcached:1.6-alpine"
RABBITMQ_IMAGE = "rabbitmq:3.12-alpine"
BEANSTALKD_IMAGE = "schickling/beanstalkd:latest"

MYSQL_GENERIC_HEALTH_CMD = 'mysql -h 127.0.0.1 -P 3306 -e \\"SELECT 1;\\"'
MARIADB_HEALTH_CMD = "healthcheck.sh --su-mysql --connect --innodb_initialized"


class ServiceSet(str, Enum):
    """Which services a section needs."""

    CORE = "core"
    EXTENDED = "extended"


@dataclass(frozen=True)
class HealthCheck:
    """Docker health-check policy."""

    command: str
    interval: str = "10s"
    timeout: str = "5s"
    retries: int = 5

    def to_options(self) -> str:
        """Render as ``docker create`` options."""
        return " ".join(
            [
                f'--health-cmd="{self.command}"',
                f"--health-interval={self.interval}",
                f"--health-timeout={self.timeout}",
                f"--health-retries={self.retries}",
            ],
        )


@dataclass(frozen=True)
class ServiceDefinition:
    """One service container."""

    image: str
    ports: tuple[str, ...]
    env: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    health_check: HealthCheck | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"image": self.image}
        if self.env:
            data["env"] = dict(self.env)
        data["ports"] = list(self.ports)
        if self.health_check is not None:
            data["options"] = self.health_check.to_options()
        return data


def mysql_health_command(image: str | None) -> str:
    """Pick the readiness probe for a MySQL-compatible image.

    MariaDB images ship their own ``healthcheck.sh``; everything else is
    probed with the mysql client over the published port.
    """
    if image and "mariadb" in image:
        return MARIADB_HEALTH_CMD
    return MYSQL_GENERIC_HEALTH_CMD


def mysql_service(image: str | None = None) -> ServiceDefinition:
    selected_image = image or MYSQL_DEFAULT_IMAGE
    return ServiceDefinition(
        image=selected_image,
        env=MappingProxyType(
            {
                "MYSQL_ALLOW_EMPTY_PASSWORD": "yes",
                "MYSQL_ROOT_HOST": "%",
                "MYSQLD_OPTS": (
                    "--default-storage-engine=InnoDB --skip-log-bin "
                    "--character-set-server=utf8mb4 --collation-server=utf8mb4_unicode_ci"
                ),
            },
        ),
        ports=("3306:3306",),
        health_check=HealthCheck(mysql_health_command(selected_image)),
    )


def postgres_service(image: str = POSTGRES_DEFAULT_IMAGE) -> ServiceDefinition:
    return ServiceDefinition(
        image=image,
        env=MappingProxyType(
            {
                "POSTGRES_USER": "postgres",
                "POSTGRES_DB": "postgres",
                "POSTGRES_HOST_AUTH_METHOD": "trust",
            },
        ),
        ports=("5432:5432",),
        health_check=HealthCheck("pg_isready -U postgres"),
    )


def redis_service(image: str = REDIS_DEFAULT_IMAGE) -> ServiceDefinition:
    return ServiceDefinition(
        image=image,
        ports=("6379:6379",),
        health_check=HealthCheck("redis-cli ping"),
    )


def build_services(
    service_set: ServiceSet = ServiceSet.CORE,
    mysql_image: str | None = None,
) -> dict[str, dict[str, Any]]:
    """Build a service bundle.

    Parameters
    ----------
    service_set : ServiceSet
        CORE is MySQL, PostgreSQL and Redis; EXTENDED adds Memcached,
        RabbitMQ and Beanstalkd
    mysql_image : str | None
        Image override for the MySQL service (e.g. a MariaDB image)

    Returns
    -------
    dict[str, dict[str, Any]]
        Service name to service definition
    """
    services = {
        "mysql": mysql_service(mysql_image),
        "postgres": postgres_service(),
        "redis": redis_service(),
    }
    if service_set is ServiceSet.EXTENDED:
        services["memcached"] = ServiceDefinition(image=MEMCACHED_IMAGE, ports=("11211:11211",))
        services["rabbitmq"] = ServiceDefinition(image=RABBITMQ_IMAGE, ports=("5672:5672",))
        services["beanstalkd"] = ServiceDefinition(image=BEANSTALKD_IMAGE, ports=("11300:11300",))

    return {name: definition.to_dict() for name, definition in services.items()}


def serialize_services(bundle: Mapping[str, Any] | None) -> str:
    """Serialize a bundle to the compact JSON embedded in each job."""
    return json.dumps(bundle, separators=(",", ":"))
