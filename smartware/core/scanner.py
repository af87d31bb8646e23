# =========================================================
# BARCODE / QR SCANNING
#
# Frame capture and pixel decoding are supplied by the caller
# (a camera wrapper and a decoder function). This module owns
# the polling loop, the camera's acquire/release scope, and the
# lookup of a decoded payload against the ledger.
# =========================================================

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Protocol, Sequence

from smartware.core.ledger import find_index
from smartware.models.product import Product


class FrameSource(Protocol):
    def open(self) -> None: ...

    def read(self) -> Any | None: ...

    def close(self) -> None: ...


Decoder = Callable[[Any], str | None]


@dataclass(frozen=True)
class ScanResult:
    payload: str
    product: Product | None

    @property
    def found(self) -> bool:
        return self.product is not None


@contextmanager
def camera(source: FrameSource):
    source.open()
    try:
        yield source
    finally:
        source.close()


def scan_for_code(
    source: FrameSource,
    decode: Decoder,
    cancel: threading.Event,
    interval: float = 1 / 30,
) -> str | None:
    """Poll frames until a code is decoded or ``cancel`` is set.

    The source is released on every exit path. Returns None when
    cancelled.
    """
    with camera(source):
        while not cancel.is_set():
            frame = source.read()
            if frame is not None:
                payload = decode(frame)
                if payload:
                    return payload
            cancel.wait(interval)

    return None


def resolve_payload(products: Sequence[Product], payload: str) -> ScanResult:
    index = find_index(products, sku=payload, product_id=payload)
    return ScanResult(payload=payload, product=products[index] if index > -1 else None)
