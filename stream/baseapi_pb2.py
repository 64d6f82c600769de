"""
Base API protobuf messages.

Built at import time from the same definitions as baseapi.proto, so the
client does not need a protoc step. To use generated code instead:

   python -m grpc_tools.protoc \\
       -I./stream \\
       --python_out=./stream \\
       --grpc_python_out=./stream \\
       stream/baseapi.proto
"""

from google.protobuf import descriptor_pb2
from google.protobuf import descriptor_pool as _descriptor_pool
from google.protobuf import message_factory

_FIELD = descriptor_pb2.FieldDescriptorProto

_file = descriptor_pb2.FileDescriptorProto(
    name="baseapi.proto",
    package="base",
    syntax="proto3",
)


def _add_message(name, *fields):
    msg = _file.message_type.add(name=name)
    for field_name, number, field_type, label in fields:
        msg.field.add(name=field_name, number=number, type=field_type, label=label)


_add_message("GetBlockStreamRequest")
_add_message(
    "Block",
    ("block_number", 1, _FIELD.TYPE_UINT64, _FIELD.LABEL_OPTIONAL),
    ("block_hash", 2, _FIELD.TYPE_STRING, _FIELD.LABEL_OPTIONAL),
    ("transactions", 3, _FIELD.TYPE_BYTES, _FIELD.LABEL_REPEATED),
)
_add_message("GetRawFlashBlocksStreamRequest")
_add_message(
    "RawFlashBlock",
    ("message", 1, _FIELD.TYPE_BYTES, _FIELD.LABEL_OPTIONAL),
)
_add_message(
    "SendTransactionRequest",
    ("raw_transaction", 1, _FIELD.TYPE_STRING, _FIELD.LABEL_OPTIONAL),
)
_add_message(
    "SendTransactionResponse",
    ("tx_hash", 1, _FIELD.TYPE_STRING, _FIELD.LABEL_OPTIONAL),
)

_service = _file.service.add(name="BaseApi")
_service.method.add(
    name="GetBlockStream",
    input_type=".base.GetBlockStreamRequest",
    output_type=".base.Block",
    server_streaming=True,
)
_service.method.add(
    name="GetRawFlashBlockStream",
    input_type=".base.GetRawFlashBlocksStreamRequest",
    output_type=".base.RawFlashBlock",
    server_streaming=True,
)
_service.method.add(
    name="SendTransaction",
    input_type=".base.SendTransactionRequest",
    output_type=".base.SendTransactionResponse",
)

DESCRIPTOR = _descriptor_pool.Default().AddSerializedFile(_file.SerializeToString())


def _message_class(name):
    return message_factory.GetMessageClass(DESCRIPTOR.message_types_by_name[name])


GetBlockStreamRequest = _message_class("GetBlockStreamRequest")
Block = _message_class("Block")
GetRawFlashBlocksStreamRequest = _message_class("GetRawFlashBlocksStreamRequest")
RawFlashBlock = _message_class("RawFlashBlock")
SendTransactionRequest = _message_class("SendTransactionRequest")
SendTransactionResponse = _message_class("SendTransactionResponse")
