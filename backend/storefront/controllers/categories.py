# Overview: Product category CRUD; category detail lists the products filed under it.

from __future__ import annotations

from ..decorators import require_admin
from ..errors import DuplicateCategoryError
from ..http import Request, Response, Router, StatusCode
from ..models import Category, Product
from ..validation import ModelValidationPolicy, ValidationError, validate_payload
from .base import Controller

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name"}),
    required_on_create=frozenset({"name"}),
)


class CategoryController(Controller):
    def register_routes(self, router: Router) -> None:
        router.post("/categories", self.create_category)
        router.get("/categories", self.get_category_list)
        router.get("/categories/:id", self.get_category)
        router.put("/categories/:id", self.update_category)
        router.delete("/categories/:id", self.delete_category)

    @require_admin
    def create_category(self, req: Request, res: Response) -> None:
        try:
            patch = validate_payload(model=Category, payload=req.body, policy=CATEGORY_POLICY, partial=False)
            category = Category.create(self.db, patch)
        except (ValidationError, DuplicateCategoryError) as e:
            self.bad_request(res, str(e))
            return
        except Exception:
            self.fail(res, "creating category")
            return

        res.send(
            StatusCode.Created,
            "Category created successfully!",
            redirect="/categories",
            payload={"category": category.props},
        )

    def get_category_list(self, req: Request, res: Response) -> None:
        try:
            categories = Category.read_all(self.db)
        except Exception:
            self.fail(res, "fetching category list")
            return
        res.send(
            StatusCode.OK,
            "Categories retrieved successfully!",
            template="CategoryListView",
            payload={"categories": [c.props for c in categories]},
        )

    def get_category(self, req: Request, res: Response) -> None:
        category_id = req.get_id()
        if category_id is None:
            self.invalid_id(res)
            return
        try:
            category = Category.read(self.db, category_id)
            if category is None:
                self.not_found(res, "Category")
                return
            products = Product.read_all(self.db, category_id=category.id)
        except Exception:
            self.fail(res, "fetching category")
            return

        res.send(
            StatusCode.OK,
            "Category retrieved successfully!",
            template="ProductList",
            payload={
                "category": category.props,
                "products": [p.props for p in products],
            },
        )

    @require_admin
    def update_category(self, req: Request, res: Response) -> None:
        category_id = req.get_id()
        if category_id is None:
            self.invalid_id(res)
            return
        try:
            category = Category.read(self.db, category_id)
            if category is None:
                self.not_found(res, "Category")
                return
            patch = validate_payload(model=Category, payload=req.body, policy=CATEGORY_POLICY, partial=True)
            if patch:
                category.update(patch)
        except (ValidationError, DuplicateCategoryError) as e:
            self.bad_request(res, str(e))
            return
        except Exception:
            self.fail(res, "updating category")
            return

        res.send(
            StatusCode.OK,
            "Category updated successfully!",
            redirect=f"/categories/{category.id}",
            payload={"category": category.props},
        )

    @require_admin
    def delete_category(self, req: Request, res: Response) -> None:
        category_id = req.get_id()
        if category_id is None:
            self.invalid_id(res)
            return
        try:
            category = Category.read(self.db, category_id)
            if category is None:
                self.not_found(res, "Category")
                return
            deleted = category.delete()
        except Exception:
            self.fail(res, "deleting category")
            return

        if not deleted:
            self.not_found(res, "Category")
            return
        res.send(StatusCode.NoContent, "Category deleted successfully!", redirect="/categories")
