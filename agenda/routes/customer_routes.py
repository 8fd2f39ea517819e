from fastapi import APIRouter, Depends
from pydantic import BaseModel

from agenda.auth.dependencies import get_current_provider_id
from agenda.core.clock import Clock
from agenda.routes.dependencies import Repositories, get_clock, get_repositories
from agenda.routes.errors import request_transaction
from agenda.routes.schemas import CustomerResponse
from agenda.use_cases.customers import list_provider_customers, update_customer

router = APIRouter(tags=['customers'])


class UpdateCustomerRequest(BaseModel):
    name: str
    email: str
    phone: str


@router.get('', response_model=list[CustomerResponse])
def list_customers(
    provider_id: str = Depends(get_current_provider_id),
    repos: Repositories = Depends(get_repositories),
):
    with request_transaction(repos.db):
        customers = list_provider_customers(provider_id, customers=repos.customers)

    return [CustomerResponse.model_validate(customer) for customer in customers]


@router.put('/{customer_id}', response_model=CustomerResponse)
def update_provider_customer(
    customer_id: str,
    data: UpdateCustomerRequest,
    provider_id: str = Depends(get_current_provider_id),
    repos: Repositories = Depends(get_repositories),
    clock: Clock = Depends(get_clock),
):
    with request_transaction(repos.db):
        customer = update_customer(
            customer_id,
            provider_id,
            data.name,
            data.email,
            data.phone,
            customers=repos.customers,
            clock=clock,
        )

    return CustomerResponse.model_validate(customer)
