"""
Catalog API — Product Service Unit Tests
========================================

What:  Tests for ProductService business rules and the persistence gateway.
How:   The repository is a MagicMock with AsyncMock methods; the gateway
       tests use the mocked AsyncSession from conftest.
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from catalog.exceptions import DatabaseError, ImageUploadError, NotFoundError, ValidationError
from catalog.models.product import Product
from catalog.services.product_service import ProductService
from catalog.services.repository import Repository, parse_entity_id
from catalog.services.upload_service import BufferedImage


def make_product(**overrides) -> Product:
    now = datetime.now(timezone.utc)
    fields = {
        "id": uuid.uuid4(),
        "name": "widget",
        "price": 9.5,
        "product_image": None,
        "expiry_date": now,
        "category_id": None,
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return Product(**fields)


def make_repository():
    repository = MagicMock()
    repository.create = AsyncMock(side_effect=lambda db, entity: entity)
    repository.find_all = AsyncMock(return_value=[])
    repository.find_by_id = AsyncMock(return_value=None)
    repository.update = AsyncMock(side_effect=lambda db, entity, values: entity)
    repository.delete_by_id = AsyncMock(return_value=0)
    return repository


class TestCreateProduct:

    def setup_method(self):
        self.repository = make_repository()
        self.service = ProductService(repository=self.repository)
        self.store = MagicMock()
        self.store.upload = AsyncMock(return_value="https://images.test/products/a.png")
        self.image = BufferedImage(filename="a.png", content_type="image/png", content=b"png")

    @pytest.mark.asyncio
    async def test_name_lowercased_and_image_url_stored(self, mock_db_session):
        result = await self.service.create_product(
            mock_db_session, {"name": "Fancy WIDGET", "price": "12.5"}, self.image, self.store
        )

        assert result.name == "fancy widget"
        assert result.price == 12.5
        assert result.product_image == "https://images.test/products/a.png"
        assert result.category_id is None
        self.repository.create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_expiry_date_is_creation_time(self, mock_db_session):
        result = await self.service.create_product(
            mock_db_session, {"name": "Milk", "price": 1}, None, self.store
        )

        assert result.expiry_date == result.created_at
        assert result.product_image is None
        self.store.upload.assert_not_called()

    @pytest.mark.asyncio
    async def test_accepts_category_id(self, mock_db_session):
        category_id = uuid.uuid4()

        result = await self.service.create_product(
            mock_db_session,
            {"name": "Milk", "price": 1, "categoryId": str(category_id)},
            None,
            self.store,
        )

        assert result.category_id == category_id

    @pytest.mark.asyncio
    async def test_invalid_fields_never_reach_store(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.create_product(
                mock_db_session, {"name": "", "price": "abc"}, self.image, self.store
            )

        self.store.upload.assert_not_called()
        self.repository.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_failure_stops_before_persistence(self, mock_db_session):
        self.store.upload = AsyncMock(side_effect=ImageUploadError(message="Image upload failed"))

        with pytest.raises(ImageUploadError):
            await self.service.create_product(
                mock_db_session, {"name": "Milk", "price": 1}, self.image, self.store
            )

        self.repository.create.assert_not_called()


class TestReadUpdateDelete:

    def setup_method(self):
        self.repository = make_repository()
        self.service = ProductService(repository=self.repository)

    @pytest.mark.asyncio
    async def test_get_missing_raises_not_found(self, mock_db_session):
        with pytest.raises(NotFoundError, match="does not exist"):
            await self.service.get_product(mock_db_session, str(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_malformed_id_is_not_found_without_query(self, mock_db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_product(mock_db_session, "not-a-uuid")

        self.repository.find_by_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_applies_only_present_keys(self, mock_db_session):
        product = make_product(name="old", price=3.0)
        self.repository.find_by_id.return_value = product

        await self.service.update_product(mock_db_session, str(product.id), {"name": "NEW Name"})

        _, _, values = self.repository.update.await_args.args
        assert values == {"name": "new name"}

    @pytest.mark.asyncio
    async def test_update_null_category_detaches(self, mock_db_session):
        product = make_product(category_id=uuid.uuid4())
        self.repository.find_by_id.return_value = product

        await self.service.update_product(mock_db_session, str(product.id), {"categoryId": None})

        _, _, values = self.repository.update.await_args.args
        assert values == {"category_id": None}

    @pytest.mark.asyncio
    async def test_update_validates_before_lookup(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.update_product(mock_db_session, str(uuid.uuid4()), {"price": "x"})

        self.repository.find_by_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_missing_raises_not_found(self, mock_db_session):
        with pytest.raises(NotFoundError):
            await self.service.update_product(mock_db_session, str(uuid.uuid4()), {"price": 2})

        self.repository.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_nothing_removed_raises_not_found(self, mock_db_session):
        with pytest.raises(NotFoundError):
            await self.service.delete_product(mock_db_session, str(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_delete_removed_row(self, mock_db_session):
        self.repository.delete_by_id.return_value = 1

        await self.service.delete_product(mock_db_session, str(uuid.uuid4()))


class TestRepository:

    def setup_method(self):
        self.repository = Repository(Product)

    @pytest.mark.asyncio
    async def test_create_adds_and_flushes(self, mock_db_session):
        product = make_product()

        assert await self.repository.create(mock_db_session, product) is product
        mock_db_session.add.assert_called_once_with(product)
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_failure_wrapped(self, mock_db_session):
        mock_db_session.flush.side_effect = SQLAlchemyError("disk full")

        with pytest.raises(DatabaseError, match="Failed to create products: disk full"):
            await self.repository.create(mock_db_session, make_product())

    @pytest.mark.asyncio
    async def test_find_by_id_returns_row(self, mock_db_session):
        product = make_product()
        result = MagicMock()
        result.scalar_one_or_none.return_value = product
        mock_db_session.execute.return_value = result

        assert await self.repository.find_by_id(mock_db_session, product.id) is product

    @pytest.mark.asyncio
    async def test_delete_returns_rowcount(self, mock_db_session):
        result = MagicMock()
        result.rowcount = 1
        mock_db_session.execute.return_value = result

        assert await self.repository.delete_by_id(mock_db_session, uuid.uuid4()) == 1

    def test_parse_entity_id(self):
        entity_id = uuid.uuid4()

        assert parse_entity_id(str(entity_id), "product") == entity_id
        with pytest.raises(NotFoundError, match="Product with ID 'abc' does not exist"):
            parse_entity_id("abc", "product")
