"""
Protobuf encodings of blob transactions.

A blob transaction travels in the block as a ``BlobTx``: the signed inner
transaction plus the blobs it pays for, tagged with type id "BLOB". When
the square is laid out, the inner transaction is written to the PFB
namespace wrapped in an ``IndexWrapper`` that records where each blob
starts (type id "INDX").

The message classes are built at import time from a descriptor defined
here, in a private descriptor pool.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import DecodeError as ProtoDecodeError

from blobstream_toolkit.shared.constants import ProtoConstants, ShareConstants

_PACKAGE = "tendermint.types"
_FIELD = descriptor_pb2.FieldDescriptorProto


def _add_field(message, name: str, number: int, field_type: int, **kwargs):
    message.field.add(
        name=name,
        number=number,
        type=field_type,
        label=kwargs.pop("label", _FIELD.LABEL_OPTIONAL),
        **kwargs,
    )


def _build_pool() -> descriptor_pool.DescriptorPool:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="blobstream_toolkit/blob.proto",
        package=_PACKAGE,
        syntax="proto3",
    )

    blob = file_proto.message_type.add(name="Blob")
    _add_field(blob, "namespace_id", 1, _FIELD.TYPE_BYTES)
    _add_field(blob, "data", 2, _FIELD.TYPE_BYTES)
    _add_field(blob, "share_version", 3, _FIELD.TYPE_UINT32)
    _add_field(blob, "namespace_version", 4, _FIELD.TYPE_UINT32)

    blob_tx = file_proto.message_type.add(name="BlobTx")
    _add_field(blob_tx, "tx", 1, _FIELD.TYPE_BYTES)
    _add_field(
        blob_tx,
        "blobs",
        2,
        _FIELD.TYPE_MESSAGE,
        label=_FIELD.LABEL_REPEATED,
        type_name=f".{_PACKAGE}.Blob",
    )
    _add_field(blob_tx, "type_id", 3, _FIELD.TYPE_STRING)

    index_wrapper = file_proto.message_type.add(name="IndexWrapper")
    _add_field(index_wrapper, "tx", 1, _FIELD.TYPE_BYTES)
    _add_field(
        index_wrapper,
        "share_indexes",
        2,
        _FIELD.TYPE_UINT32,
        label=_FIELD.LABEL_REPEATED,
    )
    _add_field(index_wrapper, "type_id", 3, _FIELD.TYPE_STRING)

    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(file_proto.SerializeToString())
    return pool


_POOL = _build_pool()

BlobMessage = message_factory.GetMessageClass(
    _POOL.FindMessageTypeByName(f"{_PACKAGE}.Blob")
)
BlobTxMessage = message_factory.GetMessageClass(
    _POOL.FindMessageTypeByName(f"{_PACKAGE}.BlobTx")
)
IndexWrapperMessage = message_factory.GetMessageClass(
    _POOL.FindMessageTypeByName(f"{_PACKAGE}.IndexWrapper")
)


@dataclass(frozen=True)
class Blob:
    """One blob carried by a blob transaction."""

    namespace_id: bytes
    data: bytes
    share_version: int = 0
    namespace_version: int = 0

    @property
    def namespace(self) -> bytes:
        """Full namespace: version byte followed by the id."""
        return bytes([self.namespace_version & 0xFF]) + self.namespace_id


@dataclass(frozen=True)
class BlobTx:
    """A decoded blob transaction."""

    tx: bytes
    blobs: Tuple[Blob, ...]


def unmarshal_blob_tx(raw: bytes) -> Optional[BlobTx]:
    """Decode ``raw`` as a BlobTx, or return None for ordinary txs.

    A message tagged "BLOB" still counts as an ordinary tx when it carries
    no blobs or a blob whose namespace id is not 28 bytes.
    """
    message = BlobTxMessage()
    try:
        message.ParseFromString(raw)
    except ProtoDecodeError:
        return None
    if message.type_id != ProtoConstants.BLOB_TX_TYPE_ID:
        return None
    if not message.blobs:
        return None
    if any(
        len(b.namespace_id) != ShareConstants.NAMESPACE_ID_SIZE
        for b in message.blobs
    ):
        return None
    return BlobTx(
        tx=bytes(message.tx),
        blobs=tuple(
            Blob(
                namespace_id=bytes(b.namespace_id),
                data=bytes(b.data),
                share_version=b.share_version,
                namespace_version=b.namespace_version,
            )
            for b in message.blobs
        ),
    )


def marshal_blob_tx(tx: bytes, blobs: Sequence[Blob]) -> bytes:
    """Encode ``tx`` and ``blobs`` the way they appear in a block."""
    message = BlobTxMessage(
        tx=tx, type_id=ProtoConstants.BLOB_TX_TYPE_ID
    )
    for blob in blobs:
        message.blobs.add(
            namespace_id=blob.namespace_id,
            data=blob.data,
            share_version=blob.share_version,
            namespace_version=blob.namespace_version,
        )
    return message.SerializeToString()


def index_wrapper_size(tx: bytes, share_indexes: Sequence[int]) -> int:
    """Encoded size of the IndexWrapper written for a blob transaction."""
    message = IndexWrapperMessage(
        tx=tx,
        share_indexes=list(share_indexes),
        type_id=ProtoConstants.INDEX_WRAPPER_TYPE_ID,
    )
    return message.ByteSize()
