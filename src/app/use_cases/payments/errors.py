from libs.result import Error
from src.app.services.payment_gateway import GatewayRejectedError, PaymentGatewayError


def gateway_error(exc: PaymentGatewayError) -> Error:
    """Map a gateway exception to a retryable error code"""
    if isinstance(exc, GatewayRejectedError):
        return Error(
            code="GATEWAY_ERROR",
            message="Payment provider rejected the request",
            reason=str(exc),
        )
    return Error(
        code="GATEWAY_UNAVAILABLE",
        message="Payment provider is unavailable, please retry",
        reason=str(exc),
    )
