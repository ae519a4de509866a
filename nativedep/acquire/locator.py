"""
Remote artifact discovery.

Nightly archives live in a storage bucket whose listing is an XML document::

    <ListBucketResult xmlns="http://doc.s3.amazonaws.com/2006-03-01">
      <Contents>
        <Key>nightly/2020-05-01/libtensorflow-cpu-linux-x86_64.tar.gz</Key>
        <Generation>1588320000000000</Generation>
        ...
      </Contents>
      ...
    </ListBucketResult>

The same file name is uploaded again every night under a new key. The
generation counter is assigned by the store and increases monotonically, so
the object with the highest generation is the newest. Generation is an opaque
ordering key, not a timestamp.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional, Tuple

import requests

from nativedep.core.download import fetch_text
from nativedep.core.exceptions import ArtifactNotFound, ListingParseError
from nativedep.core.identity import LibraryIdentity
from nativedep.core.platform import PlatformDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemoteObject:
    """One stored object of the bucket listing."""

    key: str
    generation: int


@dataclass(frozen=True)
class RemoteObjectIndex:
    """Objects of one listing fetch, in document order."""

    objects: Tuple[RemoteObject, ...] = ()

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self):
        return iter(self.objects)

    def matching(self, suffix: str) -> Tuple[RemoteObject, ...]:
        return tuple(obj for obj in self.objects if obj.key.endswith(suffix))

    def latest(self, suffix: str) -> RemoteObject:
        """
        Newest object whose key ends with a suffix.

        Raises:
            ArtifactNotFound: If no key ends with the suffix
        """
        candidates = self.matching(suffix)
        if not candidates:
            raise ArtifactNotFound(suffix)
        return max(candidates, key=lambda obj: obj.generation)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ET.Element, name: str) -> Optional[str]:
    for child in element:
        if _local_name(child.tag) == name:
            return (child.text or "").strip()
    return None


def parse_listing(document: str) -> RemoteObjectIndex:
    """
    Parse a bucket listing document.

    Namespaces are ignored so listings from S3-compatible stores parse alike.

    Raises:
        ListingParseError: If the document is not XML or an object is malformed
    """
    try:
        root = ET.fromstring(document)
    except ET.ParseError as e:
        raise ListingParseError(f"Invalid bucket listing: {e}") from e

    objects = []
    for element in root.iter():
        if _local_name(element.tag) != "Contents":
            continue
        key = _child_text(element, "Key")
        generation = _child_text(element, "Generation")
        if not key or generation is None:
            raise ListingParseError("Listing entry without Key or Generation")
        try:
            objects.append(RemoteObject(key=key, generation=int(generation)))
        except ValueError as e:
            raise ListingParseError(
                f"Invalid generation {generation!r} for {key}"
            ) from e

    return RemoteObjectIndex(tuple(objects))


class RemoteArtifactLocator:
    """
    Resolves the download URL of the newest prebuilt archive for a platform.

    Example:
        >>> locator = RemoteArtifactLocator(TENSORFLOW)
        >>> locator.locate(PlatformDescriptor("linux", "x64"))
        'https://storage.googleapis.com/libtensorflow-nightly/.../libtensorflow-cpu-linux-x86_64.tar.gz'
    """

    def __init__(
        self,
        identity: LibraryIdentity,
        session: Optional[requests.Session] = None,
        timeout: int = 30,
    ):
        self.identity = identity
        self.session = session
        self.timeout = timeout

    @property
    def base_url(self) -> str:
        return self.identity.listing_url.rstrip("/")

    def fetch_index(self) -> RemoteObjectIndex:
        """Fetch and parse the full listing (single request, no pagination)."""
        document = fetch_text(self.base_url, session=self.session, timeout=self.timeout)
        index = parse_listing(document)
        logger.debug(f"Listing contains {len(index)} objects")
        return index

    def select(self, index: RemoteObjectIndex, platform: PlatformDescriptor) -> str:
        suffix = self.identity.archive_file_name(platform)
        logger.debug(f"filename = {suffix!r}")
        winner = index.latest(suffix)
        return f"{self.base_url}/{winner.key}"

    def locate(self, platform: PlatformDescriptor) -> str:
        """
        Resolve the URL of the newest archive for a platform.

        Raises:
            DownloadFailed: If the listing cannot be fetched
            ListingParseError: If the listing cannot be parsed
            ArtifactNotFound: If no archive matches the platform
        """
        url = self.select(self.fetch_index(), platform)
        logger.info(f"Latest prebuilt archive: {url}")
        return url


__all__ = [
    "RemoteObject",
    "RemoteObjectIndex",
    "RemoteArtifactLocator",
    "parse_listing",
]
