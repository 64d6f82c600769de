"""Pydantic settings for the Base block stream client."""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # BlockRazor Base API (pick the region closest to you)
    grpc_endpoint: str = Field(
        default="tokyo.grpc.base.blockrazor.xyz:80",
        description="Base API gRPC endpoint (host:port, plaintext)"
    )
    websocket_url: str = Field(
        default="ws://tokyo.base.blockrazor.xyz:81/ws",
        description="Base API WebSocket endpoint"
    )
    auth_token: str = Field(
        default="",
        description="Base API auth token"
    )

    # Timeouts
    block_connect_timeout: float = Field(
        default=30.0,
        description="Seconds to wait for the gRPC channel on the block stream"
    )
    flash_connect_timeout: float = Field(
        default=5.0,
        description="Seconds to wait for the gRPC channel on the flash block stream"
    )
    websocket_connect_timeout: float = Field(
        default=30.0,
        description="Seconds to wait for the WebSocket handshake"
    )
    submit_timeout: float = Field(
        default=3.0,
        description="Deadline for a single SendTransaction call"
    )

    # WebSocket
    websocket_max_message_size: int = Field(
        default=64 * 1024 * 1024,
        description="Max inbound WebSocket frame size in bytes"
    )

    # gRPC channel options
    grpc_max_receive_message_length: int = Field(
        default=64 * 1024 * 1024,
        description="Max inbound gRPC message size in bytes"
    )
    grpc_keepalive_time_ms: int = Field(
        default=10000,
        description="gRPC keepalive ping interval"
    )
    grpc_keepalive_timeout_ms: int = Field(
        default=5000,
        description="gRPC keepalive ping timeout"
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )

    @property
    def grpc_channel_options(self) -> list:
        """Channel options shared by every gRPC adapter."""
        return [
            ("grpc.max_receive_message_length", self.grpc_max_receive_message_length),
            ("grpc.keepalive_time_ms", self.grpc_keepalive_time_ms),
            ("grpc.keepalive_timeout_ms", self.grpc_keepalive_timeout_ms),
            ("grpc.keepalive_permit_without_calls", True),
        ]

    model_config = {
        "env_prefix": "BASE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore"
    }


# Global settings instance
settings = Settings()
