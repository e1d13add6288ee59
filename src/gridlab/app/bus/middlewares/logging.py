import logging
import time
from dataclasses import dataclass, field
from typing import override

from gridlab.app.bus.interfaces.middleware import (
    CallNextHandlerMiddlewareType,
    HandlerMiddleware,
)
from gridlab.app.contracts.context import Context
from gridlab.app.contracts.dto import DTO
from gridlab.app.contracts.exceptions import AppError
from gridlab.shared.types import Clock


@dataclass(frozen=True, slots=True)
class LoggingMiddleware(HandlerMiddleware[Context]):
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("gridlab.bus"))
    clock: Clock = time.perf_counter

    @override
    async def __call__[Q: DTO, R](
        self,
        call_next: CallNextHandlerMiddlewareType,
        context: Context,
        qc: Q,
        /,
    ) -> R:
        started = self.clock()
        try:
            result: R = await call_next(context, qc)
        except AppError as e:
            self.logger.info(
                "%s failed in %.2fms [request_id=%s]: %s",
                type(qc).__name__,
                (self.clock() - started) * 1000,
                context.request_id,
                e.raw_message,
            )
            raise

        self.logger.debug(
            "%s handled in %.2fms [request_id=%s]",
            type(qc).__name__,
            (self.clock() - started) * 1000,
            context.request_id,
        )
        return result
