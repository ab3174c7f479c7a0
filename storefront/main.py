"""
Storefront Service API

This module implements the FastAPI application behind Sacy's Kitchen: accounts,
favorites, order checkout, order history and the admin order panel. All state
lives in a Redis key-value store; identities come from an external auth
provider.

Endpoints:
    POST /signup, POST /fix-account: account creation and repair
    GET|POST /favorites, DELETE /favorites/{item_id}: favorite menu items
    POST|GET /orders: place an order, list own orders
    GET /admin/orders, PUT /admin/orders/{order_id}: admin order management
    GET /profile: current user's profile
    POST /request-password-reset, POST /reset-password: password reset
    GET|POST /payment-details: shop bank account for transfers
    GET /healthz: Health check endpoint for orchestration systems

Attributes:
    app (FastAPI): The FastAPI application instance configured with the title "storefront-service"
"""
import logging
import secrets
import time
from typing import Optional

import redis.asyncio as redis
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import auth, config, crud, schemas, validators
from .clients.auth_provider import (
    AuthProviderClient,
    AuthProviderError,
    get_auth_provider,
    is_confirmed,
)
from .kv_store import KVStore, get_kv

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="storefront-service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(redis.RedisError)
async def store_exception_handler(request: Request, exc: redis.RedisError):
    logger.error(f"Key-value store error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.exception_handler(AuthProviderError)
async def auth_provider_exception_handler(request: Request, exc: AuthProviderError):
    logger.error(f"Auth provider error on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def _server_error(detail: str, e: Exception) -> HTTPException:
    logger.error(f"{detail}: {e}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


@app.get("/healthz", response_model=dict)
def health():
    """
    Health check endpoint for the storefront service.

    Returns:
        dict: {"status": "healthy"} when the service is operational.
    """
    return {"status": "healthy"}


# Accounts

@app.post("/signup", response_model=schemas.Message, response_model_exclude_none=True)
async def signup(
    payload: schemas.SignUp,
    kv: KVStore = Depends(get_kv),
    provider: AuthProviderClient = Depends(get_auth_provider),
):
    """
    Create an account, or verify an existing unconfirmed one.

    Raises:
        HTTPException: 400 if the auth provider rejects the account
        HTTPException: 409 if the email is already registered and confirmed
    """
    logger.info(f"Signup attempt for email: {payload.email}")
    try:
        existing_user = await provider.find_user_by_email(payload.email)
        if existing_user:
            if is_confirmed(existing_user):
                return JSONResponse(
                    status_code=status.HTTP_409_CONFLICT,
                    content={
                        "detail": "This email is already registered. Please sign in instead.",
                        "code": "DUPLICATE_EMAIL",
                    },
                )

            logger.info(f"Verifying existing unconfirmed user: {existing_user['id']}")
            await provider.update_user(
                existing_user["id"],
                email_confirm=True,
                password=payload.password,
                user_metadata={"name": payload.name},
            )
            await crud.ensure_user_records(kv, existing_user["id"], payload.name, payload.email)
            return schemas.Message(
                message="Account verified successfully. You can now sign in.",
                user_id=existing_user["id"],
            )

        user = await provider.create_user(payload.email, payload.password, payload.name)
        logger.info(f"User created successfully: {user['id']}")
        await crud.ensure_user_records(kv, user["id"], payload.name, payload.email)
        return schemas.Message(
            message="Account created successfully. You can now sign in.",
            user_id=user["id"],
        )
    except AuthProviderError as e:
        if e.status_code >= 500:
            raise _server_error("Failed to create account", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception as e:
        raise _server_error("Failed to create account", e)


@app.post("/fix-account", response_model=schemas.Message, response_model_exclude_none=True)
async def fix_account(
    payload: schemas.FixAccount,
    kv: KVStore = Depends(get_kv),
    provider: AuthProviderClient = Depends(get_auth_provider),
):
    """
    Confirm an existing account's email and make sure its records exist.

    Raises:
        HTTPException: 404 if no account has this email
    """
    try:
        user = await provider.find_user_by_email(payload.email)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No account found with this email. Please sign up.",
            )

        logger.info(f"Fixing account for: {payload.email}, verified: {is_confirmed(user)}")
        await provider.update_user(user["id"], email_confirm=True)
        name = (user.get("user_metadata") or {}).get("name") or "User"
        await crud.ensure_user_records(kv, user["id"], name, user.get("email") or payload.email)
        return schemas.Message(
            message="Account verified successfully. You can now sign in.",
            user_id=user["id"],
        )
    except HTTPException:
        raise
    except AuthProviderError as e:
        if e.status_code >= 500:
            raise _server_error("Failed to fix account", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception as e:
        raise _server_error("Failed to fix account", e)


@app.get("/profile", response_model=schemas.ProfileResponse)
async def get_profile(
    kv: KVStore = Depends(get_kv),
    current_user: auth.CurrentUser = Depends(auth.get_current_user),
):
    """
    Get the current user's profile, including the administrator flag.
    """
    try:
        profile = await crud.get_profile(kv, current_user.id) or {}
        is_admin = await crud.is_admin(kv, current_user.id)
    except Exception as e:
        raise _server_error("Failed to get profile", e)

    return schemas.ProfileResponse(
        profile=schemas.Profile.model_validate({
            **profile,
            "id": current_user.id,
            "accessToken": current_user.token,
            "isAdmin": is_admin,
        })
    )


@app.post(
    "/request-password-reset",
    response_model=schemas.PasswordResetRequested,
    response_model_exclude_none=True,
)
async def request_password_reset(
    payload: schemas.PasswordResetRequest,
    kv: KVStore = Depends(get_kv),
    provider: AuthProviderClient = Depends(get_auth_provider),
):
    """
    Issue a six-digit reset code. The response never reveals whether the
    email exists; the code itself is only returned in development mode.
    """
    message = "If the email exists, a reset code has been sent."
    try:
        user = await provider.find_user_by_email(payload.email)
        if not user:
            return schemas.PasswordResetRequested(message=message)

        reset_code = str(100000 + secrets.randbelow(900000))
        expires_at = int(time.time() * 1000) + config.RESET_CODE_TTL_SECONDS * 1000
        await crud.save_reset_code(kv, payload.email, auth.hash_reset_code(reset_code), expires_at)
    except Exception as e:
        raise _server_error("Failed to request password reset", e)

    if config.EXPOSE_RESET_CODE:
        logger.info(f"Password reset code for {payload.email}: {reset_code}")
        return schemas.PasswordResetRequested(message=message, reset_code=reset_code)

    logger.info(f"Password reset code issued for {payload.email}")
    return schemas.PasswordResetRequested(message=message)


@app.post("/reset-password", response_model=schemas.Message, response_model_exclude_none=True)
async def reset_password(
    payload: schemas.PasswordReset,
    kv: KVStore = Depends(get_kv),
    provider: AuthProviderClient = Depends(get_auth_provider),
):
    """
    Set a new password using a previously issued reset code.

    Raises:
        HTTPException: 400 if the code is missing, expired or wrong
        HTTPException: 404 if the user no longer exists
    """
    try:
        reset_data = await crud.get_reset_code(kv, payload.email)
        if not reset_data:
            raise HTTPException(status_code=400, detail="Invalid or expired reset code")

        if int(time.time() * 1000) > reset_data["expiresAt"]:
            await crud.delete_reset_code(kv, payload.email)
            raise HTTPException(status_code=400, detail="Reset code has expired")

        if not auth.verify_reset_code(payload.reset_code, reset_data["codeHash"]):
            raise HTTPException(status_code=400, detail="Invalid reset code")

        user = await provider.find_user_by_email(payload.email)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        await provider.update_user(user["id"], password=payload.new_password)
        await crud.delete_reset_code(kv, payload.email)
        logger.info(f"Password reset successful for {payload.email}")
        return schemas.Message(message="Password reset successfully")
    except HTTPException:
        raise
    except AuthProviderError as e:
        if e.status_code >= 500:
            raise _server_error("Failed to reset password", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception as e:
        raise _server_error("Failed to reset password", e)


# Favorites

@app.get("/favorites", response_model=schemas.Favorites)
async def get_favorites(
    kv: KVStore = Depends(get_kv),
    current_user: auth.CurrentUser = Depends(auth.get_current_user),
):
    try:
        favorites = await crud.get_favorites(kv, current_user.id)
    except Exception as e:
        raise _server_error("Failed to get favorites", e)
    return schemas.Favorites(favorites=favorites)


@app.post("/favorites", response_model=schemas.Favorites)
async def add_favorite(
    payload: schemas.FavoriteAdd,
    kv: KVStore = Depends(get_kv),
    current_user: auth.CurrentUser = Depends(auth.get_current_user),
):
    """
    Add a menu item to the current user's favorites.

    Returns:
        The updated favorites list
    """
    try:
        favorites = await crud.add_favorite(kv, current_user.id, payload.item_id)
    except Exception as e:
        raise _server_error("Failed to add to favorites", e)
    return schemas.Favorites(favorites=favorites)


@app.delete("/favorites/{item_id}", response_model=schemas.Favorites)
async def remove_favorite(
    item_id: str,
    kv: KVStore = Depends(get_kv),
    current_user: auth.CurrentUser = Depends(auth.get_current_user),
):
    try:
        favorites = await crud.remove_favorite(kv, current_user.id, item_id)
    except Exception as e:
        raise _server_error("Failed to remove from favorites", e)
    return schemas.Favorites(favorites=favorites)


# Orders

@app.post("/orders", response_model=schemas.OrderCreated, status_code=status.HTTP_201_CREATED)
async def create_order(
    order: schemas.OrderCreate,
    kv: KVStore = Depends(get_kv),
    current_user: auth.CurrentUser = Depends(auth.get_current_user),
):
    """
    Place an order for the current user (status "pending").

    The client-computed total is stored as submitted unless strict pricing is
    enabled, in which case items are re-priced against the menu catalog.

    Raises:
        HTTPException: 400 if strict pricing rejects the order
    """
    if config.STRICT_PRICING:
        is_valid, error_message = validators.validate_catalog_prices(order.items)
        if is_valid:
            is_valid, error_message = validators.validate_order_total(order.items, order.total)
        if not is_valid:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_message)
    else:
        is_valid, error_message = validators.validate_order_total(order.items, order.total)
        if not is_valid:
            logger.warning(f"Accepting client total for user {current_user.id}: {error_message}")

    try:
        order_id, db_order = await crud.create_order(kv, order, current_user.id, current_user.email)
    except Exception as e:
        raise _server_error("Failed to create order", e)
    return schemas.OrderCreated(order_id=order_id, order=db_order)


@app.get("/orders", response_model=schemas.OrderList)
async def list_orders(
    kv: KVStore = Depends(get_kv),
    current_user: auth.CurrentUser = Depends(auth.get_current_user),
):
    """
    List the current user's orders, newest first.
    """
    try:
        orders = await crud.get_user_orders(kv, current_user.id)
    except Exception as e:
        raise _server_error("Failed to get orders", e)
    return schemas.OrderList(orders=orders)


@app.get("/admin/orders", response_model=schemas.OrderList)
async def list_all_orders(
    kv: KVStore = Depends(get_kv),
    current_user: auth.CurrentUser = Depends(auth.require_admin),
):
    """
    List every order in creation order (admin only).
    """
    try:
        orders = await crud.get_all_orders(kv)
    except Exception as e:
        raise _server_error("Failed to get orders", e)
    return schemas.OrderList(orders=orders)


@app.put("/admin/orders/{order_id}", response_model=schemas.OrderUpdated)
async def update_order_status(
    order_id: str,
    update: schemas.OrderStatusUpdate,
    kv: KVStore = Depends(get_kv),
    current_user: auth.CurrentUser = Depends(auth.require_admin),
):
    """
    Set an order's status (admin only).

    Any status may be set from any other unless ENFORCE_STATUS_TRANSITIONS
    is enabled.

    Raises:
        HTTPException: 404 if order not found
        HTTPException: 409 if the transition is not allowed
    """
    try:
        existing_order = await crud.get_order(kv, order_id)
        if existing_order is None:
            raise HTTPException(status_code=404, detail="Order not found")

        if config.ENFORCE_STATUS_TRANSITIONS:
            is_valid, error_message = validators.validate_status_transition(
                existing_order.status, update.status
            )
            if not is_valid:
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=error_message)

        db_order = await crud.update_order_status(kv, order_id, update.status)
        if db_order is None:
            raise HTTPException(status_code=404, detail="Order not found")
    except HTTPException:
        raise
    except Exception as e:
        raise _server_error("Failed to update order", e)

    logger.info(
        f"Order {order_id} status changed from '{existing_order.status}' to "
        f"'{update.status}' by admin {current_user.id}"
    )
    return schemas.OrderUpdated(order=db_order)


# Payment details

@app.get("/payment-details", response_model=schemas.PaymentDetailsResponse)
async def get_payment_details(
    kv: KVStore = Depends(get_kv),
    current_user: Optional[auth.CurrentUser] = Depends(auth.get_optional_user),
):
    """
    Get the shop's bank account details for checkout. Anonymous access is allowed.
    """
    if current_user is not None:
        logger.debug(f"Payment details requested by {current_user.id}")
    try:
        details = await crud.get_payment_details(kv)
    except Exception as e:
        raise _server_error("Failed to get payment details", e)
    return schemas.PaymentDetailsResponse(details=details)


@app.post("/payment-details", response_model=schemas.Message, response_model_exclude_none=True)
async def update_payment_details(
    payload: schemas.PaymentDetailsUpdate,
    kv: KVStore = Depends(get_kv),
    current_user: auth.CurrentUser = Depends(auth.require_admin),
):
    """
    Replace the shop's bank account details (admin only).
    """
    try:
        await crud.set_payment_details(kv, payload.details)
    except Exception as e:
        raise _server_error("Failed to update payment details", e)
    logger.info(f"Payment details updated by admin {current_user.id}")
    return schemas.Message(message="Payment details updated successfully")
