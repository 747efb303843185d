"""Tests for the relational Product API endpoints."""


def create(client, **body):
    return client.post("/api/products", json=body)


def test_create_product(client):
    """Test creating a new product."""
    response = create(client, name="Test Product", price=99.99, stock=10)

    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Product created successfully"
    assert isinstance(data["productId"], int)

    product = client.get(f"/api/products/{data['productId']}").json()["product"]
    assert product["name"] == "Test Product"
    assert product["price"] == 99.99
    assert product["stock"] == 10
    assert product["created_at"] is not None
    assert product["updated_at"] is None


def test_create_product_defaults_stock_to_zero(client):
    """Omitted stock is stored as 0."""
    product_id = create(client, name="No Stock", price=5).json()["productId"]

    product = client.get(f"/api/products/{product_id}").json()["product"]
    assert product["stock"] == 0


def test_create_product_non_numeric_stock_becomes_zero(client):
    product_id = create(client, name="Odd Stock", price=5, stock="lots").json()["productId"]

    product = client.get(f"/api/products/{product_id}").json()["product"]
    assert product["stock"] == 0


def test_create_product_trims_name_and_accepts_string_numbers(client):
    product_id = create(client, name="  Padded  ", price="12.50", stock="3").json()["productId"]

    product = client.get(f"/api/products/{product_id}").json()["product"]
    assert product["name"] == "Padded"
    assert product["price"] == 12.5
    assert product["stock"] == 3


def test_create_product_blank_name_rejected(client):
    """Whitespace-only names are rejected and nothing is stored."""
    response = create(client, name="   ", price=10)

    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert data["field"] == "name"
    assert client.get("/api/products").json()["count"] == 0


def test_create_product_missing_name_rejected(client):
    response = create(client, price=10)

    assert response.status_code == 400
    assert response.json()["field"] == "name"


def test_create_product_name_too_long_rejected(client):
    response = create(client, name="x" * 101, price=10)

    assert response.status_code == 400
    assert response.json()["field"] == "name"


def test_create_product_invalid_price(client):
    """Test creating product with a non-numeric price fails."""
    response = create(client, name="Test Product", price="abc")

    assert response.status_code == 400
    data = response.json()
    assert data["field"] == "price"
    assert "price" in data["error"].lower()


def test_create_product_missing_price(client):
    response = create(client, name="Test Product")

    assert response.status_code == 400
    assert response.json()["field"] == "price"


def test_create_product_negative_price(client):
    response = create(client, name="Test Product", price=-10.00)

    assert response.status_code == 400
    assert response.json()["field"] == "price"


def test_create_product_negative_stock(client):
    response = create(client, name="Test Product", price=1, stock=-5)

    assert response.status_code == 400
    assert response.json()["field"] == "stock"


def test_get_product(client):
    """Test getting a product by ID."""
    product_id = create(client, name="Test Product", price=50.00, stock=5).json()["productId"]

    response = client.get(f"/api/products/{product_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["product"]["id"] == product_id
    assert data["product"]["name"] == "Test Product"


def test_get_product_not_found(client):
    """Test getting non-existent product returns 404."""
    response = client.get("/api/products/9999")

    assert response.status_code == 404
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "Product with ID 9999 not found"


def test_get_product_non_numeric_id_not_found(client):
    response = client.get("/api/products/abc")

    assert response.status_code == 404
    assert "abc" in response.json()["error"]


def test_list_products_empty(client):
    """An empty store yields an empty list, not an error."""
    response = client.get("/api/products")

    assert response.status_code == 200
    assert response.json() == {"success": True, "products": [], "count": 0}


def test_list_products_newest_first(client):
    """Test listing products returns all rows, newest first."""
    for i in range(5):
        create(client, name=f"Product {i}", price=10.00 + i, stock=10)

    response = client.get("/api/products")

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 5
    assert [p["name"] for p in data["products"]] == [f"Product {i}" for i in reversed(range(5))]


def test_update_product(client):
    """Test updating a product."""
    product_id = create(client, name="Original Name", price=50.00, stock=10).json()["productId"]

    response = client.put(
        f"/api/products/{product_id}",
        json={"name": "Updated Name", "price": 75.00, "stock": 4}
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Product updated successfully"}

    product = client.get(f"/api/products/{product_id}").json()["product"]
    assert product["name"] == "Updated Name"
    assert product["price"] == 75.00
    assert product["stock"] == 4
    assert product["updated_at"] is not None


def test_update_product_rewrites_missing_stock(client):
    """Every update writes stock; leaving it out resets it to 0."""
    product_id = create(client, name="Stocked", price=50.00, stock=10).json()["productId"]

    client.put(f"/api/products/{product_id}", json={"name": "Stocked", "price": 50.00})

    product = client.get(f"/api/products/{product_id}").json()["product"]
    assert product["stock"] == 0


def test_update_product_blank_name_rejected(client):
    product_id = create(client, name="Keep Me", price=50.00).json()["productId"]

    response = client.put(f"/api/products/{product_id}", json={"name": "", "price": 1})

    assert response.status_code == 400
    assert response.json()["field"] == "name"
    product = client.get(f"/api/products/{product_id}").json()["product"]
    assert product["name"] == "Keep Me"


def test_update_product_not_found(client):
    """Updating an unknown id returns 404 and changes nothing."""
    create(client, name="Untouched", price=1.00, stock=1)

    response = client.put("/api/products/9999", json={"name": "Ghost", "price": 1})

    assert response.status_code == 404
    products = client.get("/api/products").json()["products"]
    assert [p["name"] for p in products] == ["Untouched"]


def test_delete_product(client):
    """Test deleting a product."""
    product_id = create(client, name="To Delete", price=25.00, stock=5).json()["productId"]

    response = client.delete(f"/api/products/{product_id}")
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Product deleted successfully"}

    # Verify it's deleted
    get_response = client.get(f"/api/products/{product_id}")
    assert get_response.status_code == 404


def test_delete_product_not_found(client):
    response = client.delete("/api/products/9999")

    assert response.status_code == 404
    assert response.json()["success"] is False


def test_ids_increase(client):
    ids = [create(client, name=f"P{i}", price=1).json()["productId"] for i in range(3)]

    assert ids == sorted(ids)
    assert len(set(ids)) == 3


def test_list_products_store_error_details_exposed_in_development(empty_client):
    """Without a products table the list fails with a 500 carrying details."""
    response = empty_client.get("/api/products")

    assert response.status_code == 500
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "Failed to fetch products"
    assert "products" in data["details"]
