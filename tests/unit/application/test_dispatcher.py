"""Unit tests for PushDispatcher routing and aggregation."""

from __future__ import annotations

import asyncio
import json
from typing import Sequence

import httpx
import pytest
import respx

from push_dispatch import DeliveryResult, Device, Platform, PushDispatcher, PushJob
from push_dispatch.adapters.apns import APNSSender
from push_dispatch.adapters.gcm import GCM_ENDPOINT, GCMSender
from push_dispatch.kernel.errors import ClassificationError, PushMisconfiguredError, TransportError
from push_dispatch.testing import InMemoryPlatformSender


def _android(token: str, app_identifier: str | None = None) -> Device:
    return Device(token=token, platform=Platform.ANDROID, app_identifier=app_identifier)


def _ios(token: str) -> Device:
    return Device(token=token, platform=Platform.IOS)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------
class TestConstruction:
    def test_empty_config(self) -> None:
        dispatcher = PushDispatcher()
        assert dispatcher.sender_for("ios") is None
        assert dispatcher.sender_for("android") is None

    def test_unsupported_platform_names_offending_keys(self) -> None:
        with pytest.raises(PushMisconfiguredError) as exc_info:
            PushDispatcher({"android": {"apiKey": "K"}, "winrt": {}, "web": {}})
        assert exc_info.value.keys == ["winrt", "web"]
        assert "winrt" in exc_info.value.message

    def test_android_builds_gcm_sender(self) -> None:
        dispatcher = PushDispatcher({"android": [{"apiKey": "K1"}, {"apiKey": "K2", "appIdentifier": "b"}]})
        sender = dispatcher.sender_for("android")
        assert isinstance(sender, GCMSender)
        assert len(sender.transports) == 2

    def test_missing_api_key_fails_construction(self) -> None:
        with pytest.raises(PushMisconfiguredError):
            PushDispatcher({"android": {"appIdentifier": "com.app"}})

    def test_ios_builds_apns_sender(self, es256_pem: str) -> None:
        dispatcher = PushDispatcher(
            {"ios": {"token": {"key": es256_pem, "keyId": "KID", "teamId": "TEAM"}, "topic": "com.app"}}
        )
        assert isinstance(dispatcher.sender_for("ios"), APNSSender)

    def test_from_senders_rejects_unknown_platform(self) -> None:
        with pytest.raises(PushMisconfiguredError):
            PushDispatcher.from_senders({"winrt": InMemoryPlatformSender("ios")})


class TestIntrospection:
    def test_valid_push_types(self) -> None:
        assert PushDispatcher().get_valid_push_types() == ["ios", "android"]

    def test_supports_push_tracking(self) -> None:
        assert PushDispatcher.supports_push_tracking is True

    def test_immediate_push_feature(self) -> None:
        assert PushDispatcher().feature["immediate_push"] is True

    def test_classify_installations(self) -> None:
        buckets = PushDispatcher.classify_installations([_ios("i")], ["ios", "android"])
        assert [d.token for d in buckets["ios"]] == ["i"]


# ---------------------------------------------------------------------------
# send
# ---------------------------------------------------------------------------
class TestSend:
    def test_fans_out_to_each_platform(self) -> None:
        async def _run() -> None:
            android, ios = InMemoryPlatformSender("android"), InMemoryPlatformSender("ios")
            dispatcher = PushDispatcher.from_senders({"android": android, "ios": ios})
            results = await dispatcher.send(PushJob(data={"alert": "hi"}), [_android("a"), _ios("i"), _android("b")])
            assert len(results) == 3
            assert all(r.transmitted for r in results)
            assert [d.token for d in android.sent[0][1]] == ["a", "b"]
            assert [d.token for d in ios.sent[0][1]] == ["i"]
        asyncio.run(_run())

    def test_results_follow_bucket_order(self) -> None:
        async def _run() -> None:
            dispatcher = PushDispatcher.from_senders(
                {"android": InMemoryPlatformSender("android"), "ios": InMemoryPlatformSender("ios")}
            )
            results = await dispatcher.send(PushJob(), [_android("a"), _ios("i")])
            assert [r.device.token for r in results] == ["i", "a"]
        asyncio.run(_run())

    def test_missing_sender_yields_untransmitted_results(self) -> None:
        async def _run() -> None:
            android = InMemoryPlatformSender("android")
            dispatcher = PushDispatcher.from_senders({"android": android})
            results = await dispatcher.send(PushJob(), [_ios("i")])
            assert len(results) == 1
            assert results[0].transmitted is False
            assert results[0].response == {"error": "no sender for platform ios"}
            assert android.count == 0
        asyncio.run(_run())

    def test_empty_buckets_skip_senders(self) -> None:
        async def _run() -> None:
            android, ios = InMemoryPlatformSender("android"), InMemoryPlatformSender("ios")
            dispatcher = PushDispatcher.from_senders({"android": android, "ios": ios})
            assert await dispatcher.send(PushJob(), []) == []
            assert android.count == ios.count == 0
        asyncio.run(_run())

    def test_one_result_per_distinct_token(self) -> None:
        async def _run() -> None:
            dispatcher = PushDispatcher.from_senders({"android": InMemoryPlatformSender("android")})
            devices = [_android("a"), _android("a"), _android("b"), _ios("i"), _ios("i")]
            results = await dispatcher.send(PushJob(), devices)
            assert len(results) == 3
            assert sorted(r.device.token for r in results) == ["a", "b", "i"]
        asyncio.run(_run())

    def test_classifier_failure_rejects_the_call(self) -> None:
        def broken(devices: Sequence[Device], valid: Sequence[str]) -> dict[str, list[Device]]:
            raise RuntimeError("boom")

        async def _run() -> None:
            dispatcher = PushDispatcher.from_senders({"android": InMemoryPlatformSender("android")}, classifier=broken)
            with pytest.raises(ClassificationError) as exc_info:
                await dispatcher.send(PushJob(), [_android("a")])
            assert isinstance(exc_info.value.__cause__, RuntimeError)
        asyncio.run(_run())

    def test_platforms_are_sent_concurrently(self) -> None:
        class Rendezvous:
            """Each side waits for the other; sequential sends would deadlock."""

            def __init__(self, mine: asyncio.Event, theirs: asyncio.Event) -> None:
                self.mine, self.theirs = mine, theirs

            async def send(self, job: PushJob, devices: Sequence[Device]) -> list[DeliveryResult]:
                self.mine.set()
                await self.theirs.wait()
                return [DeliveryResult(device=d, transmitted=True) for d in devices]

        async def _run() -> None:
            left, right = asyncio.Event(), asyncio.Event()
            dispatcher = PushDispatcher.from_senders(
                {"android": Rendezvous(left, right), "ios": Rendezvous(right, left)}
            )
            results = await asyncio.wait_for(dispatcher.send(PushJob(), [_android("a"), _ios("i")]), timeout=2)
            assert len(results) == 2
        asyncio.run(_run())


# ---------------------------------------------------------------------------
# End to end with a mocked GCM endpoint
# ---------------------------------------------------------------------------
class TestGcmEndToEnd:
    @respx.mock
    def test_android_configured_ios_not(self) -> None:
        route = respx.post(GCM_ENDPOINT).mock(
            return_value=httpx.Response(
                200,
                json={"multicast_id": 77, "success": 1, "failure": 0, "results": [{"message_id": "0:1"}]},
            )
        )

        async def _run() -> None:
            dispatcher = PushDispatcher({"android": {"apiKey": "K"}})
            results = await dispatcher.send(PushJob(data={"alert": "hi"}), [_android("a"), _ios("b")])
            by_token = {r.device.token: r for r in results}
            assert len(results) == 2
            assert by_token["a"].transmitted is True
            assert by_token["a"].batch_id == 77
            assert by_token["a"].device.platform is Platform.ANDROID
            assert by_token["b"].transmitted is False
            assert by_token["b"].response == {"error": "no sender for platform ios"}

            request = route.calls.last.request
            assert request.headers["authorization"] == "key=K"
            body = json.loads(request.content)
            assert body["registration_ids"] == ["a"]
            assert json.loads(body["data"]["data"]) == {"alert": "hi"}

        asyncio.run(_run())
        assert route.call_count == 1

    @respx.mock
    def test_gcm_outage_reported_per_device(self) -> None:
        respx.post(GCM_ENDPOINT).mock(return_value=httpx.Response(401, text="Unauthorized"))

        async def _run() -> None:
            dispatcher = PushDispatcher({"android": {"apiKey": "bad"}})
            results = await dispatcher.send(PushJob(), [_android("a"), _android("b")])
            assert [r.transmitted for r in results] == [False, False]
            assert results[0].response is results[1].response
            assert results[0].response.status_code == 401

        asyncio.run(_run())

    @respx.mock
    def test_non_object_body_reported_per_device(self) -> None:
        respx.post(GCM_ENDPOINT).mock(return_value=httpx.Response(200, json=["unexpected"]))

        async def _run() -> None:
            dispatcher = PushDispatcher({"android": {"apiKey": "K"}})
            results = await dispatcher.send(PushJob(), [_android("a"), _android("b")])
            assert [r.transmitted for r in results] == [False, False]
            assert isinstance(results[0].response, TransportError)
            assert results[0].response is results[1].response

        asyncio.run(_run())

    @respx.mock
    def test_non_object_result_entry_not_transmitted(self) -> None:
        respx.post(GCM_ENDPOINT).mock(
            return_value=httpx.Response(200, json={"multicast_id": 5, "results": ["oops", {"message_id": "0:1"}]})
        )

        async def _run() -> None:
            dispatcher = PushDispatcher({"android": {"apiKey": "K"}})
            results = await dispatcher.send(PushJob(), [_android("a"), _android("b")])
            assert [r.transmitted for r in results] == [False, True]
            assert results[0].response == {"error": "MalformedResult", "raw": "oops"}

        asyncio.run(_run())


class TestSenderCrash:
    def test_other_platforms_settle_before_error_surfaces(self) -> None:
        class Crashing:
            async def send(self, job: PushJob, devices: Sequence[Device]) -> list[DeliveryResult]:
                raise RuntimeError("sender bug")

        class Slow(InMemoryPlatformSender):
            finished = False

            async def send(self, job: PushJob, devices: Sequence[Device]) -> list[DeliveryResult]:
                await asyncio.sleep(0.01)
                results = await super().send(job, devices)
                self.finished = True
                return results

        async def _run() -> None:
            slow = Slow("ios")
            dispatcher = PushDispatcher.from_senders({"android": Crashing(), "ios": slow})
            with pytest.raises(RuntimeError, match="sender bug"):
                await dispatcher.send(PushJob(), [_android("a"), _ios("i")])
            assert slow.finished is True

        asyncio.run(_run())
