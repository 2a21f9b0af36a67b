from fastapi import APIRouter, Depends, status

from futsal.crud.accounts import customer_crud
from futsal.deps import CurrentCustomer, get_current_customer
from futsal.schemas import (
    ApiResponse,
    CustomerAuthResponse,
    CustomerRegister,
    CustomerResponse,
    LoginRequest,
)

router = APIRouter(tags=["auth"])


@router.post(
    "/auth/register",
    response_model=ApiResponse[CustomerAuthResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(payload: CustomerRegister) -> ApiResponse[CustomerAuthResponse]:
    result = await customer_crud.register(payload)
    return ApiResponse(message="Registration successful", data=result)


@router.post("/auth/login", response_model=ApiResponse[CustomerAuthResponse])
async def login(payload: LoginRequest) -> ApiResponse[CustomerAuthResponse]:
    result = await customer_crud.login(payload.email, payload.password)
    return ApiResponse(message="Login successful", data=result)


@router.get("/profile", response_model=ApiResponse[CustomerResponse])
async def profile(
    customer: CurrentCustomer = Depends(get_current_customer),
) -> ApiResponse[CustomerResponse]:
    return ApiResponse(
        message="Profile retrieved", data=await customer_crud.profile(customer.id)
    )
