# Overview: Product catalog: public browsing, admin-only create/update/delete.

from __future__ import annotations

from ..decorators import require_admin
from ..http import Request, Response, Router, StatusCode
from ..models import Category, Product
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_product,
    require_positive_quantity,
    validate_payload,
)
from .base import Controller

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"title", "description", "url", "price", "inventory", "category_id"}),
    required_on_create=frozenset({"title", "price"}),
)


class ProductController(Controller):
    def register_routes(self, router: Router) -> None:
        router.get("/product", self.get_product_list)
        router.post("/products", self.create_product)
        router.get("/products", self.get_product_list)
        router.get("/products/new", self.get_new_product_form)
        router.get("/products/:id", self.get_product)
        router.get("/products/:id/edit", self.get_edit_product_form)
        router.put("/products/:id", self.update_product)
        router.delete("/products/:id", self.delete_product)

    def _validated_patch(self, req: Request, *, partial: bool) -> dict:
        patch = validate_payload(model=Product, payload=req.body, policy=PRODUCT_POLICY, partial=partial)
        enforce_rules_product(patch)
        if patch.get("category_id") is not None and Category.read(self.db, patch["category_id"]) is None:
            raise ValidationError("category_id does not reference an existing category")
        return patch

    @require_admin
    def get_new_product_form(self, req: Request, res: Response) -> None:
        try:
            categories = Category.read_all(self.db)
        except Exception:
            self.fail(res, "loading new product form")
            return
        res.send(
            StatusCode.OK,
            "New Product form",
            template="NewProductFormView",
            payload={"title": "New Product", "categories": [c.props for c in categories]},
        )

    @require_admin
    def get_edit_product_form(self, req: Request, res: Response) -> None:
        product_id = req.get_id()
        if product_id is None:
            self.invalid_id(res)
            return
        try:
            product = Product.read(self.db, product_id)
            if product is None:
                self.not_found(res, "Product")
                return
            categories = Category.read_all(self.db)
        except Exception:
            self.fail(res, "getting product")
            return
        res.send(
            StatusCode.OK,
            "Edit Product form",
            template="EditProductFormView",
            payload={"product": product.props, "categories": [c.props for c in categories]},
        )

    @require_admin
    def create_product(self, req: Request, res: Response) -> None:
        try:
            product = Product.create(self.db, self._validated_patch(req, partial=False))
        except ValidationError as e:
            self.bad_request(res, str(e))
            return
        except Exception:
            self.fail(res, "creating product")
            return

        res.send(
            StatusCode.Created,
            "Product created successfully",
            redirect=f"/products/{product.id}",
            payload={"product": product.props},
        )

    def get_product(self, req: Request, res: Response) -> None:
        product_id = req.get_id()
        if product_id is None:
            self.invalid_id(res)
            return
        try:
            product = Product.read(self.db, product_id)
        except Exception:
            self.fail(res, "retrieving product")
            return
        if product is None:
            self.not_found(res, "Product")
            return
        res.send(
            StatusCode.OK,
            "Product retrieved successfully",
            template="ProductView",
            payload={"product": product.props},
        )

    def get_product_list(self, req: Request, res: Response) -> None:
        raw_category = req.get_search_params().get("categoryId")
        category_id = None
        if raw_category:
            try:
                category_id = require_positive_quantity(raw_category, field="categoryId")
            except ValidationError:
                self.bad_request(res, "categoryId must be an integer")
                return
        try:
            products = Product.read_all(self.db, category_id=category_id)
        except Exception:
            self.fail(res, "retrieving products")
            return
        res.send(
            StatusCode.OK,
            "Products retrieved successfully",
            template="ProductList",
            payload={
                "products": [p.props for p in products],
                "isLoggedIn": req.get_session().is_logged_in(),
            },
        )

    @require_admin
    def update_product(self, req: Request, res: Response) -> None:
        product_id = req.get_id()
        if product_id is None:
            self.invalid_id(res)
            return
        try:
            product = Product.read(self.db, product_id)
            if product is None:
                self.not_found(res, "Product")
                return
            patch = self._validated_patch(req, partial=True)
            if patch:
                product.update(patch)
        except ValidationError as e:
            self.bad_request(res, str(e))
            return
        except Exception:
            self.fail(res, "updating product")
            return

        res.send(
            StatusCode.OK,
            "Product updated successfully",
            redirect=f"/products/{product.id}",
            payload={"product": product.props},
        )

    @require_admin
    def delete_product(self, req: Request, res: Response) -> None:
        product_id = req.get_id()
        if product_id is None:
            self.invalid_id(res)
            return
        try:
            product = Product.read(self.db, product_id)
            if product is None:
                self.not_found(res, "Product")
                return
            deleted = product.delete()
        except Exception:
            self.fail(res, "deleting product")
            return

        if not deleted:
            self.not_found(res, "Product")
            return
        res.send(StatusCode.NoContent, "Product deleted successfully", redirect="/products")
