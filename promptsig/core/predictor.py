"""
Predictor - Module Execution

Runs a module against a model:

    predict:         render -> transport.generate -> parse -> validate
    predict_stream:  render -> transport.generate_stream -> reassemble -> validate

Each call allocates its own buffer and session state; nothing is shared
across calls. Streaming uses one producer task that pumps transport chunks
into a bounded queue, and the generator itself as the only consumer.
"""

import asyncio
import contextlib
import logging
from typing import Any, AsyncIterator, Dict, Mapping, Optional, Union

from .config import PredictOptions, get_config
from ..integrations.llm_clients import BaseLLMClient, GenerationConfig, LLMMessage
from ..integrations.model_router import resolve_client
from ..parsing.delimited_parser import parse_output
from ..prompting.compiler import render_prompt
from ..schema.normalizer import normalize_module
from ..streaming.reassembler import StreamReassembler
from ..validation.adapter import validate_inputs, validate_outputs

logger = logging.getLogger(__name__)

OptionsLike = Union[PredictOptions, Mapping[str, Any], None]

# Queue item marking the end of the transport stream
_END = object()


class _TransportFailure:
    """Carries a producer-side exception across the queue"""

    def __init__(self, error: BaseException):
        self.error = error


def _prepare(module, inputs, options: OptionsLike, client: Optional[BaseLLMClient]):
    normalized = normalize_module(module)
    opts = PredictOptions.from_mapping(options)
    inputs = dict(inputs or {})

    if opts.validate:
        validate_inputs(normalized, inputs)

    prompt = render_prompt(normalized, inputs)
    client = client or resolve_client(opts.model, api_key=opts.api_key)
    messages = [LLMMessage(role="user", content=prompt)]
    return normalized, opts, client, messages


async def predict(
    module,
    inputs: Optional[Mapping[str, Any]] = None,
    options: OptionsLike = None,
    client: Optional[BaseLLMClient] = None,
) -> Dict[str, Any]:
    """
    Run a module once and return its typed output map.

    Args:
        module: Module, NormalizedModule or module mapping
        inputs: Map of input field name to value
        options: Recognized keys (model, validate, api_key) plus provider
                 options passed through to the transport
        client: Transport to use instead of routing by model name

    Returns:
        Dict of output field name to typed value (None when missing)

    Raises:
        ValidationError: if validation is enabled and a schema rejects the
                         inputs or the parsed outputs
    """
    normalized, opts, client, messages = _prepare(module, inputs, options, client)

    response = await client.generate(
        messages, GenerationConfig.from_options(opts.provider_options)
    )
    logger.debug(
        f"[{client.model_name}] reply of {len(response.content)} chars "
        f"in {response.latency_ms:.0f}ms"
    )

    outputs = parse_output(response.content, normalized.outputs)
    if opts.validate:
        validate_outputs(normalized, outputs)
    return outputs


def predict_sync(
    module,
    inputs: Optional[Mapping[str, Any]] = None,
    options: OptionsLike = None,
    client: Optional[BaseLLMClient] = None,
) -> Dict[str, Any]:
    """Blocking wrapper around predict() for callers without an event loop"""
    return asyncio.run(predict(module, inputs, options, client=client))


async def _pump(stream: AsyncIterator[str], queue: asyncio.Queue) -> None:
    """Move transport chunks into the queue until the stream ends or fails"""
    try:
        async with contextlib.aclosing(stream):
            async for chunk in stream:
                await queue.put(chunk)
    except Exception as e:
        logger.error(f"Transport stream failed: {e}")
        await queue.put(_TransportFailure(e))
        return
    await queue.put(_END)


async def predict_stream(
    module,
    inputs: Optional[Mapping[str, Any]] = None,
    options: OptionsLike = None,
    client: Optional[BaseLLMClient] = None,
) -> AsyncIterator[Dict[str, Any]]:
    """
    Run a module against a streaming transport, yielding progressively
    more complete output maps.

    Updates are debounced (options["debounce_ms"]) and monotonic: a field
    that has resolved never goes back to None. The last map yielded is the
    final parse of the full reply, and only that map is validated.

    Closing the generator early cancels the transport stream.

    Usage:
        async for partial in predict_stream(module, {"question": "..."}):
            render(partial)
    """
    normalized, opts, client, messages = _prepare(module, inputs, options, client)
    config = get_config()

    reassembler = StreamReassembler(normalized.outputs, debounce_ms=opts.debounce_ms)
    queue: asyncio.Queue = asyncio.Queue(maxsize=config.streaming.queue_size)
    stream = client.generate_stream(
        messages, GenerationConfig.from_options(opts.provider_options)
    )
    producer = asyncio.create_task(_pump(stream, queue))
    getter: Optional[asyncio.Future] = None

    try:
        while True:
            if getter is None:
                getter = asyncio.ensure_future(queue.get())

            # Wake up for the next chunk, or when a held-back update may go out
            timeout = reassembler.seconds_until_ready() if reassembler.pending else None
            done, _ = await asyncio.wait({getter}, timeout=timeout)

            if not done:
                update = reassembler.poll()
                if update is not None:
                    yield update
                continue

            item = getter.result()
            getter = None

            if item is _END:
                break
            if isinstance(item, _TransportFailure):
                raise item.error

            update = reassembler.feed(item)
            if update is not None:
                yield update

        final = reassembler.finish()
        logger.debug(
            f"[{client.model_name}] stream complete: {reassembler.chunks_received} chunks, "
            f"{reassembler.emissions} emissions"
        )
        if opts.validate:
            validate_outputs(normalized, final)
        yield final

    finally:
        if getter is not None:
            getter.cancel()
        producer.cancel()
        await asyncio.gather(producer, return_exceptions=True)
