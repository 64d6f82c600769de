"""Client-side gRPC stub for the Base API service."""

from . import baseapi_pb2 as baseapi__pb2


class BaseApiStub(object):
    """Base API: block streams and transaction submission."""

    def __init__(self, channel):
        """Constructor.

        Args:
            channel: A grpc.Channel or grpc.aio.Channel.
        """
        self.GetBlockStream = channel.unary_stream(
            '/base.BaseApi/GetBlockStream',
            request_serializer=baseapi__pb2.GetBlockStreamRequest.SerializeToString,
            response_deserializer=baseapi__pb2.Block.FromString,
        )
        self.GetRawFlashBlockStream = channel.unary_stream(
            '/base.BaseApi/GetRawFlashBlockStream',
            request_serializer=baseapi__pb2.GetRawFlashBlocksStreamRequest.SerializeToString,
            response_deserializer=baseapi__pb2.RawFlashBlock.FromString,
        )
        self.SendTransaction = channel.unary_unary(
            '/base.BaseApi/SendTransaction',
            request_serializer=baseapi__pb2.SendTransactionRequest.SerializeToString,
            response_deserializer=baseapi__pb2.SendTransactionResponse.FromString,
        )
