import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import unittest

from sitesmith.domain import SiteBrief
from sitesmith.mocks import MockModelGateway
from sitesmith.pipeline.model_client import RunModelClient
from sitesmith.streaming import LiveStream


class TestLiveStream(unittest.TestCase):

    def test_thought_straddling_chunks(self):
        live = LiveStream()
        live.begin("page-build", "Home")

        live.feed("<thi")
        self.assertEqual(live.state.thoughts, [])
        self.assertEqual(live.state.cleaned, "<thi")

        live.feed("nk>plan</th")
        self.assertEqual(live.state.thoughts, [])

        live.feed("ink><p>hi</p>")
        self.assertEqual(live.state.raw, "<think>plan</think><p>hi</p>")
        self.assertEqual(live.state.cleaned, "<p>hi</p>")
        self.assertEqual(live.state.thoughts, ["plan"])
        self.assertEqual(live.state.history, ["plan"])

        live.feed("<p>more</p>")
        self.assertEqual(live.state.history, ["plan"])

    def test_history_only_grows_with_new_thoughts(self):
        live = LiveStream()
        live.begin("page-build", "Home")
        live.feed("<think>one</think>")
        live.feed("<think>two</think>")
        live.feed("<think>one</think>")
        self.assertEqual(live.state.history, ["one", "two"])

    def test_begin_supersedes_previous_step(self):
        live = LiveStream()
        live.begin("chrome", "Shared chrome")
        live.feed("<think>old</think>{}")
        live.begin("sitemap", "Site map")
        self.assertEqual(live.state.phase, "sitemap")
        self.assertEqual(live.state.raw, "")
        self.assertEqual(live.state.history, [])
        self.assertTrue(live.is_current("sitemap", "Site map"))
        self.assertFalse(live.is_current("chrome", "Shared chrome"))

    def test_snapshot_is_a_copy(self):
        live = LiveStream()
        live.begin("page-build", "Home")
        live.feed("<think>x</think>body")
        snap = live.snapshot()
        snap.history.append("tampered")
        self.assertEqual(live.state.history, ["x"])


class TestLiveStreamUpdates(unittest.IsolatedAsyncioTestCase):

    async def test_observer_receives_snapshots_until_close(self):
        live = LiveStream()
        received = []

        async def collect():
            async for snap in live.updates():
                received.append(snap)

        collector = asyncio.create_task(collect())
        await asyncio.sleep(0)

        live.begin("page-build", "Home")
        live.feed("<think>plan</think>")
        live.feed("<p>hi</p>")
        live.close()
        await asyncio.wait_for(collector, timeout=1)

        self.assertEqual(len(received), 3)
        self.assertEqual(received[0].raw, "")
        self.assertEqual(received[-1].cleaned, "<p>hi</p>")
        self.assertEqual(received[-1].history, ["plan"])

    async def test_slow_observer_keeps_latest(self):
        live = LiveStream(max_queue=2)
        received = []

        async def collect():
            async for snap in live.updates():
                received.append(snap.raw)

        collector = asyncio.create_task(collect())
        await asyncio.sleep(0)

        live.begin("page-build", "Home")
        for chunk in ["a", "b", "c", "d"]:
            live.feed(chunk)
        live.close()
        await asyncio.wait_for(collector, timeout=1)

        self.assertEqual(received[-1], "abcd")


class TestRunModelClient(unittest.IsolatedAsyncioTestCase):

    async def test_stream_text_feeds_live_stream(self):
        gateway = MockModelGateway(chunk_size=7)
        live = LiveStream()
        client = RunModelClient(gateway, SiteBrief("bakery", 1, "mock-model"), live)

        result = await client.stream_text("### TASK: PAGE_BUILD\nPAGE_ID: home\n", phase="page-build", label="Home")

        self.assertTrue(result.cleaned.startswith("<!DOCTYPE html>"))
        self.assertEqual(result.thoughts, ["Laying out the home page."])
        self.assertEqual(live.state.phase, "page-build")
        self.assertEqual(live.state.history, ["Laying out the home page."])
        self.assertTrue(gateway.requests[0].stream)

    async def test_prompt_json_parses_and_applies_preamble(self):
        gateway = MockModelGateway()
        live = LiveStream()
        brief = SiteBrief("bakery", 2, "mock-model", system_preamble="Be brief.")
        client = RunModelClient(gateway, brief, live)

        data = await client.prompt_json("### TASK: SITE_MAP\nPAGE_COUNT: 2\n", phase="sitemap", label="Site map")

        self.assertEqual([p["id"] for p in data["pages"]], ["home", "about"])
        request = gateway.requests[0]
        self.assertTrue(request.json_mode)
        self.assertTrue(request.prompt.startswith("Be brief."))
        self.assertEqual(request.model_id, "mock-model")
        self.assertEqual(live.state.phase, "sitemap")

    async def test_prompt_json_returns_none_for_prose(self):
        gateway = MockModelGateway(responses={"SITE_MAP": "I would rather not."})
        client = RunModelClient(gateway, SiteBrief("bakery", 1, "mock-model"), LiveStream())
        self.assertIsNone(await client.prompt_json("### TASK: SITE_MAP\n", phase="sitemap"))
