"""Sign in with Apple authentication strategy.

AppleStrategy handles both legs of the flow. Given an inbound request it
produces exactly one Outcome:

- Redirect: no code and no error; send the user to Apple
- Fail: Apple reported an error such as user_cancelled_authorize, or the
  verify callback rejected the user
- Success: the code was exchanged and the verify callback accepted the user
- Error: signing, token exchange, identity token or verify callback failed
"""

from __future__ import annotations

import asyncio
import inspect
import threading
from typing import Any, Callable, Mapping, Optional, Tuple, Union

import structlog

from siwa.assertion import ClientAssertionSigner
from siwa.authorization import build_authorization_url
from siwa.claims import IdentityClaimsExtractor
from siwa.core.outcome import OutcomeChannel, OutcomeHandler
from siwa.core.token_verifier import IdentityTokenVerifier
from siwa.core.transport import OAuth2Transport
from siwa.exceptions import ConfigurationError, DuplicateOutcomeError, SiwaError
from siwa.exchange import TokenExchangeAdapter
from siwa.models import (
    CallbackRequest,
    Error,
    Fail,
    FailureInfo,
    NormalizedProfile,
    Outcome,
    Redirect,
    StrategyConfig,
    Success,
    TokenResponse,
)
from siwa.profile import normalize
from siwa.transports.http import RequestsTransport

log = structlog.get_logger()

USER_CANCELLED = "user_cancelled_authorize"

DENIAL_MESSAGES = {
    USER_CANCELLED: "User cancelled authorize",
}

VerifyCallback = Callable[..., Any]


def denial_message(error_code: str) -> str:
    """Human-readable message for an error code posted to the callback."""
    message = DENIAL_MESSAGES.get(error_code)
    if message:
        return message
    return error_code.replace("_", " ").strip().capitalize() or "Authorization failed"


class _VerifyDone:
    """The done callback handed to the application's verify function.

    Accepts exactly one call, from any thread, and resolves the future the
    strategy is awaiting. A call arriving after the event loop has gone away
    is dropped.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, future: asyncio.Future):
        self._loop = loop
        self._future = future
        self._lock = threading.Lock()
        self._called = False

    def __call__(self, err: Any = None, user: Any = None, info: Any = None) -> None:
        with self._lock:
            if self._called:
                raise DuplicateOutcomeError("verify callback called done more than once")
            self._called = True
        try:
            self._loop.call_soon_threadsafe(self._resolve, (err, user, info))
        except RuntimeError:
            log.debug("verify_done_after_loop_closed")

    @property
    def called(self) -> bool:
        return self._called

    def close(self) -> bool:
        """Refuse further calls. Returns True if done had already been called."""
        with self._lock:
            already_called = self._called
            self._called = True
        return already_called

    def _resolve(self, result: Tuple[Any, Any, Any]) -> None:
        if not self._future.done():
            self._future.set_result(result)


class AppleStrategy:
    """Sign in with Apple strategy.

    Args:
        config: StrategyConfig, or a mapping of its options
        verify: Application callback invoked as
            verify(access_token, refresh_token, profile, done), or with the
            request first when pass_request_to_callback is True. done(err,
            user, info=None) must be called once. May be a coroutine function.
        transport: OAuth2Transport for the token request. Defaults to
            RequestsTransport against config.token_url.
        verifier: Optional IdentityTokenVerifier for id_token signatures
        pass_request_to_callback: Pass the CallbackRequest to verify

    authenticate() completes only once done has been called. A verify callback
    that returns without calling done, and never calls it later, leaves the
    invocation pending; hosts that need a bound wrap the call in
    asyncio.wait_for.

    Raises:
        ConfigurationError: If verify or a required option is missing

    Example:
        >>> strategy = AppleStrategy(StrategyConfig.from_env(), verify)
        >>> outcome = await strategy.authenticate(CallbackRequest(body=form))
    """

    name = "apple"

    def __init__(
        self,
        config: Union[StrategyConfig, Mapping[str, Any], None] = None,
        verify: Optional[VerifyCallback] = None,
        transport: Optional[OAuth2Transport] = None,
        verifier: Optional[IdentityTokenVerifier] = None,
        pass_request_to_callback: bool = False,
    ):
        if verify is None or not callable(verify):
            raise ConfigurationError("verify", "AppleStrategy requires a verify callback")

        if not isinstance(config, StrategyConfig):
            config = StrategyConfig.from_options(config)

        self.config = config
        self._verify = verify
        self._pass_request = pass_request_to_callback
        self._signer = ClientAssertionSigner(config)
        self._extractor = IdentityClaimsExtractor(config, verifier)
        self._transport = transport or RequestsTransport(
            client_id=config.client_id,
            token_url=config.token_url,
        )

    async def authenticate(
        self,
        request: CallbackRequest,
        channel: Union[OutcomeChannel, OutcomeHandler, None] = None,
        transport: Optional[OAuth2Transport] = None,
    ) -> Outcome:
        """Run one step of the flow for request.

        Args:
            request: The inbound request
            channel: Optional OutcomeChannel (or bare OutcomeHandler) that
                receives the outcome
            transport: Overrides the configured transport for this call

        Returns:
            The single Outcome of this invocation
        """
        outcome = await self._dispatch(request, transport or self._transport)

        if channel is not None:
            if isinstance(channel, OutcomeHandler):
                channel = OutcomeChannel(channel)
            channel.deliver(outcome)

        return outcome

    def authenticate_sync(
        self,
        request: CallbackRequest,
        channel: Union[OutcomeChannel, OutcomeHandler, None] = None,
        transport: Optional[OAuth2Transport] = None,
    ) -> Outcome:
        """Synchronous version of authenticate for hosts without an event loop."""
        return asyncio.run(self.authenticate(request, channel, transport))

    async def _dispatch(self, request: CallbackRequest, transport: OAuth2Transport) -> Outcome:
        body = request.body or {}

        error_code = body.get("error")
        if error_code:
            log.info("apple_authorization_denied", error_code=error_code)
            return Fail(FailureInfo(message=denial_message(str(error_code)), code=error_code))

        code = body.get("code")
        if code:
            return await self._authorize(request, code, transport)

        return Redirect(build_authorization_url(self.config, request))

    async def _authorize(
        self,
        request: CallbackRequest,
        code: str,
        transport: OAuth2Transport,
    ) -> Outcome:
        try:
            assertion = self._signer.sign()
            tokens = await TokenExchangeAdapter(self.config, transport).exchange(code, assertion)
            claims = self._extractor.extract(tokens)
            profile = normalize(claims, request.body, tokens.params)
        except SiwaError as e:
            log.warning("apple_authentication_error", error_code=e.code, error=e.message)
            return Error(e)
        except Exception as e:
            log.exception("apple_authentication_unexpected_error")
            return Error(e)

        log.debug("apple_profile_normalized", sub=profile.id, has_name=profile.name is not None)

        return await self._run_verify(request, tokens, profile)

    async def _run_verify(
        self,
        request: CallbackRequest,
        tokens: TokenResponse,
        profile: NormalizedProfile,
    ) -> Outcome:
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        done = _VerifyDone(loop, future)

        args: Tuple[Any, ...] = (tokens.access_token, tokens.refresh_token, profile, done)
        if self._pass_request:
            args = (request,) + args

        try:
            result = self._verify(*args)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            if not done.close():
                log.warning("verify_callback_raised", error=str(e))
                return Error(e)
            log.warning("verify_callback_raised_after_done", error=str(e))

        if not done.called:
            log.info("verify_callback_returned_without_done", sub=profile.id)

        err, user, info = await future

        if err is not None:
            return Error(err)
        if not user:
            return Fail(info)
        return Success(user, info)
