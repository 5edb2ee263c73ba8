import asyncio
import os
import tempfile
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union
from uuid import NAMESPACE_URL, uuid5

from pydantic import ValidationError

from booking_app.core.exceptions import PersistenceError, SchemaError
from booking_app.core.logger import logger
from booking_app.models.booking import Booking, BookingList

Mutator = Callable[[Booking], Optional[Booking]]


class BookingStore:
    """
    Owns the JSON document holding every booking.

    The document is always read and written whole. Mutating operations run
    their load-modify-save cycle under a single lock, so two requests can
    never save over each other's changes.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def load(self) -> List[Booking]:
        """
        Returns the stored bookings in insertion order.
        A missing, unreadable or malformed document counts as no bookings.
        """
        try:
            return await asyncio.to_thread(self._read)
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.warning(f"⚠️ Cannot read {self.path}, treating as empty: {e}")
            return []
        except SchemaError as e:
            logger.warning(f"⚠️ {e}, treating as empty")
            return []

    async def save(self, bookings: Sequence[Booking]) -> None:
        """
        Overwrites the document with `bookings`.
        Raises PersistenceError if the write did not happen.
        """
        write = asyncio.ensure_future(asyncio.to_thread(self._write, list(bookings)))
        try:
            await asyncio.shield(write)
        except asyncio.CancelledError:
            # Hold the caller's lock until the file is replaced
            await write
            raise

    async def append(self, booking: Booking) -> None:
        async with self._lock:
            bookings = await self.load()
            bookings.append(booking)
            await self.save(bookings)
        logger.info(f"💾 Stored booking {booking.id} at index {len(bookings) - 1}")

    async def append_if(self, booking: Booking, accept: Callable[[List[Booking]], bool]) -> bool:
        """
        Appends `booking` only if `accept(existing_bookings)` is true.
        The check and the write happen in the same locked cycle.
        """
        async with self._lock:
            bookings = await self.load()
            if not accept(bookings):
                return False
            bookings.append(booking)
            await self.save(bookings)
        logger.info(f"💾 Stored booking {booking.id} at index {len(bookings) - 1}")
        return True

    async def update_at(self, index: int, mutator: Mutator) -> bool:
        """
        Applies `mutator` to the booking at `index` and saves.
        The mutator may change the booking in place or return a replacement.
        Returns False without writing when the index is out of range.
        """
        async with self._lock:
            bookings = await self.load()
            if not 0 <= index < len(bookings):
                logger.info(f"ℹ️ Update ignored, index {index} out of range ({len(bookings)} bookings)")
                return False
            self._apply(bookings, index, mutator)
            await self.save(bookings)
        return True

    async def delete_at(self, index: int) -> bool:
        """
        Removes the booking at `index`; later bookings move up one place.
        Returns False without writing when the index is out of range.
        """
        async with self._lock:
            bookings = await self.load()
            if not 0 <= index < len(bookings):
                logger.info(f"ℹ️ Delete ignored, index {index} out of range ({len(bookings)} bookings)")
                return False
            removed = bookings.pop(index)
            await self.save(bookings)
        logger.info(f"🗑️ Deleted booking {removed.id} (index {index})")
        return True

    async def update_by_id(self, booking_id: str, mutator: Mutator) -> bool:
        async with self._lock:
            bookings = await self.load()
            index = self._position(bookings, booking_id)
            if index is None:
                return False
            self._apply(bookings, index, mutator)
            await self.save(bookings)
        return True

    async def delete_by_id(self, booking_id: str) -> bool:
        async with self._lock:
            bookings = await self.load()
            index = self._position(bookings, booking_id)
            if index is None:
                return False
            bookings.pop(index)
            await self.save(bookings)
        logger.info(f"🗑️ Deleted booking {booking_id} (index {index})")
        return True

    @staticmethod
    def _apply(bookings: List[Booking], index: int, mutator: Mutator) -> None:
        replacement = mutator(bookings[index])
        if replacement is not None:
            bookings[index] = replacement

    @staticmethod
    def _position(bookings: List[Booking], booking_id: str) -> Optional[int]:
        for index, booking in enumerate(bookings):
            if booking.id == booking_id:
                return index
        return None

    def _read(self) -> List[Booking]:
        data = self.path.read_bytes()
        try:
            bookings = BookingList.validate_json(data)
        except ValidationError as e:
            raise SchemaError(f"{self.path} is not a valid booking list ({e.error_count()} errors)") from e
        for index, booking in enumerate(bookings):
            if "id" not in booking.model_fields_set:
                booking.id = self._legacy_id(index, booking)
        return bookings

    @staticmethod
    def _legacy_id(index: int, booking: Booking) -> str:
        """
        Id for a record written before ids existed. Derived from its position
        and content so every load of the same document yields the same id,
        until the next save stores it.
        """
        content = booking.model_dump_json(exclude={"id"})
        return uuid5(NAMESPACE_URL, f"booking:{index}:{content}").hex

    def _write(self, bookings: List[Booking]) -> None:
        data = BookingList.dump_json(bookings, indent=2)
        directory = self.path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "wb", dir=directory, prefix=f".{self.path.name}.", suffix=".tmp", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            logger.error(f"❌ Failed to write {self.path}: {e}")
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Could not save bookings to {self.path}: {e}") from e
