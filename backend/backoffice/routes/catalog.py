# Overview: Flask API routes for the raw-material and product catalogs; parses input and returns JSON responses.

from flask import Blueprint, jsonify

from ..decorators import handle_service_errors, json_body
from ..services import catalog_service


raw_products_bp = Blueprint("raw_products", __name__, url_prefix="/api/raw-products")
products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@raw_products_bp.get("")
@handle_service_errors("list raw products")
def list_raw_products_route():
    return jsonify([r.to_dict() for r in catalog_service.list_raw_products()])


@raw_products_bp.post("")
@handle_service_errors("create raw product")
def create_raw_product_route():
    raw = catalog_service.create_raw_product(json_body())
    return jsonify(raw.to_dict()), 201


@raw_products_bp.put("/<int:raw_product_id>")
@handle_service_errors("update raw product")
def update_raw_product_route(raw_product_id: int):
    raw = catalog_service.update_raw_product(raw_product_id, json_body())
    return jsonify(raw.to_dict())


@raw_products_bp.delete("/<int:raw_product_id>")
@handle_service_errors("delete raw product")
def delete_raw_product_route(raw_product_id: int):
    catalog_service.delete_raw_product(raw_product_id)
    return jsonify({"message": "Raw product deleted successfully"})


@products_bp.get("")
@handle_service_errors("list products")
def list_products_route():
    return jsonify([p.to_dict() for p in catalog_service.list_products()])


@products_bp.post("")
@handle_service_errors("create product")
def create_product_route():
    product = catalog_service.create_product(json_body())
    return jsonify(product.to_dict()), 201


@products_bp.get("/<int:product_id>")
@handle_service_errors("load product")
def get_product_route(product_id: int):
    return jsonify(catalog_service.get_product(product_id).to_dict())


@products_bp.put("/<int:product_id>")
@handle_service_errors("update product")
def update_product_route(product_id: int):
    product = catalog_service.update_product(product_id, json_body())
    return jsonify(product.to_dict())


@products_bp.delete("/<int:product_id>")
@handle_service_errors("delete product")
def delete_product_route(product_id: int):
    catalog_service.delete_product(product_id)
    return jsonify({"message": "Product removed"})
