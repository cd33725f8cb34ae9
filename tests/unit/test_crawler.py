import asyncio
from collections import Counter

import pytest

from smartcrawl.errors import SessionInitError
from smartcrawl.exploration.crawler import CrawlOrchestrator, CrawlState, PageState

A = 'https://site.test/a'
B = 'https://site.test/b'
C = 'https://site.test/c'
D = 'https://site.test/d'


def make_orchestrator(config, browser_manager, discoverer, site):
    return CrawlOrchestrator(
        config,
        browser_manager=browser_manager,
        discoverer=discoverer,
        navigator_factory=site.navigator_factory,
    )


@pytest.mark.asyncio
async def test_cycle_terminates_and_visits_each_url_once(crawler_config, browser_manager, discoverer, make_site):
    site = make_site({A: [B], B: [A, B + '#top']})
    crawler = make_orchestrator(crawler_config(), browser_manager, discoverer, site)

    result = await crawler.crawl(A, 3)

    assert result.visited == [A, B]
    assert Counter(site.navigations) == {A: 1, B: 1}
    assert set(result.inventory) == {A, B}


@pytest.mark.asyncio
async def test_failed_navigation_is_isolated_to_its_url(crawler_config, browser_manager, discoverer, make_site):
    site = make_site({A: [B, C]}, failing=[B])
    crawler = make_orchestrator(crawler_config(), browser_manager, discoverer, site)

    result = await crawler.crawl(A, 2)

    assert set(result.inventory) == {A, C}
    assert B in result.visited
    assert result.failed_urls == [B]
    nav_errors = [e for e in result.errors if e.error_type == 'navigation_error']
    assert nav_errors[0].context['attempts'] == 3


@pytest.mark.asyncio
async def test_zero_depth_is_a_no_op(crawler_config, browser_manager, discoverer, make_site):
    site = make_site({A: [B]})
    crawler = make_orchestrator(crawler_config(), browser_manager, discoverer, site)

    result = await crawler.crawl(A, 0)

    assert result.visited == []
    assert result.inventory == {}
    assert site.navigations == []
    assert browser_manager.setup_calls == 0


@pytest.mark.asyncio
async def test_depth_bounds_traversal(crawler_config, browser_manager, discoverer, make_site):
    site = make_site({A: [B], B: [C], C: [D]})
    crawler = make_orchestrator(crawler_config(), browser_manager, discoverer, site)

    result = await crawler.crawl(A, 2)

    assert result.visited == [A, B]
    assert C not in site.navigations


@pytest.mark.asyncio
async def test_inventory_is_deduplicated_per_page(crawler_config, browser_manager, discoverer, make_site):
    site = make_site({})
    crawler = make_orchestrator(crawler_config(), browser_manager, discoverer, site)

    result = await crawler.crawl(A, 1)

    selectors = [element.selector for element in result.inventory[A]]
    assert selectors == ['id=submit', 'name=q']


@pytest.mark.asyncio
async def test_parallel_workers_never_crawl_a_url_twice(crawler_config, browser_manager, discoverer, make_site):
    hubs = [f'https://site.test/hub{i}' for i in range(6)]
    leaves = [f'https://site.test/leaf{i}' for i in range(4)]
    links = {A: hubs}
    for hub in hubs:
        links[hub] = leaves + [A] + hubs
    for leaf in leaves:
        links[leaf] = hubs
    site = make_site(links)
    crawler = make_orchestrator(crawler_config(max_concurrency=4), browser_manager, discoverer, site)

    result = await crawler.crawl(A, 3)

    counts = Counter(site.navigations)
    assert set(counts) == {A, *hubs, *leaves}
    assert all(count == 1 for count in counts.values())
    assert len(result.visited) == len(set(result.visited)) == 11
    assert len(browser_manager.pages) == 4


@pytest.mark.asyncio
async def test_discovery_crash_does_not_stop_siblings(crawler_config, browser_manager, make_discoverer, make_site):
    site = make_site({A: [B, C]})
    discoverer = make_discoverer(broken_urls=[B])
    crawler = make_orchestrator(crawler_config(), browser_manager, discoverer, site)

    result = await crawler.crawl(A, 2)

    assert set(result.inventory) == {A, C}
    assert [e.url for e in result.errors if e.error_type == 'crawl_error'] == [B]


@pytest.mark.asyncio
async def test_cancellation_stops_new_navigations(crawler_config, browser_manager, discoverer, make_site):
    cancel_event = asyncio.Event()
    site = make_site({A: [B, C], B: [D]}, on_navigate=lambda url: cancel_event.set())
    crawler = make_orchestrator(crawler_config(), browser_manager, discoverer, site)

    result = await crawler.crawl(A, 3, cancel_event=cancel_event)

    assert site.navigations == [A]
    assert set(result.inventory) == {A}
    assert result.cancelled
    assert browser_manager.cleanup_calls == 1


@pytest.mark.asyncio
async def test_cancel_method_stops_crawl(crawler_config, browser_manager, discoverer, make_site):
    crawler = None
    site = make_site({A: [B, C]}, on_navigate=lambda url: crawler.cancel())
    crawler = make_orchestrator(crawler_config(), browser_manager, discoverer, site)

    result = await crawler.crawl(A, 2)

    assert site.navigations == [A]
    assert result.cancelled


@pytest.mark.asyncio
async def test_error_summary_groups_isolated_failures(crawler_config, browser_manager, make_discoverer, make_site):
    site = make_site({A: [B, C]}, failing=[B])
    crawler = make_orchestrator(crawler_config(), browser_manager, make_discoverer(broken_urls=[C]), site)

    await crawler.crawl(A, 2)

    summary = crawler.error_handler.get_error_summary()
    assert summary['total_errors'] == 2
    assert summary['by_type'] == {'navigation_error': 1, 'crawl_error': 1}
    assert summary['by_severity'] == {'high': 2}


@pytest.mark.asyncio
async def test_session_failure_propagates(crawler_config, failing_browser_manager, discoverer, make_site):
    site = make_site({A: [B]})
    crawler = make_orchestrator(crawler_config(), failing_browser_manager, discoverer, site)

    with pytest.raises(SessionInitError):
        await crawler.crawl(A, 2)
    assert site.navigations == []


@pytest.mark.asyncio
async def test_session_is_released_after_crawl(crawler_config, browser_manager, discoverer, make_site):
    site = make_site({A: [B]}, failing=[B])
    crawler = make_orchestrator(crawler_config(), browser_manager, discoverer, site)

    await crawler.crawl(A, 2)

    assert browser_manager.setup_calls == 1
    assert browser_manager.cleanup_calls == 1


@pytest.mark.asyncio
async def test_external_links_are_not_followed(crawler_config, browser_manager, discoverer, make_site):
    site = make_site({A: ['https://elsewhere.test/', 'mailto:team@site.test', '/b']})
    crawler = make_orchestrator(crawler_config(), browser_manager, discoverer, site)

    result = await crawler.crawl(A, 2)

    assert result.visited == [A, B]


@pytest.mark.asyncio
async def test_max_pages_caps_visits(crawler_config, browser_manager, discoverer, make_site):
    site = make_site({A: [B, C, D]})
    crawler = make_orchestrator(crawler_config(max_pages=2), browser_manager, discoverer, site)

    result = await crawler.crawl(A, 2)

    assert result.visited == [A, B]


@pytest.mark.asyncio
async def test_claim_is_atomic_under_contention():
    state = CrawlState()

    claims = await asyncio.gather(*(state.claim(A) for _ in range(20)))

    assert claims.count(True) == 1
    assert state.visited == {A}


def test_result_serializes_inventory(crawler_config, browser_manager, discoverer, make_site):
    site = make_site({})
    crawler = make_orchestrator(crawler_config(), browser_manager, discoverer, site)

    result = asyncio.run(crawler.crawl(A, 1))
    data = result.to_dict()

    assert data['inventory'][A][0] == {
        'selector': 'id=submit',
        'kind': 'button',
        'attributes': {'id': 'submit', 'role': 'button'},
        'interactions': ['click', 'hover', 'doubleClick'],
        'text': '',
    }


@pytest.mark.asyncio
async def test_site_root_with_and_without_trailing_slash_is_one_page(
        crawler_config, browser_manager, discoverer, make_site):
    root = 'https://site.test/'
    site = make_site({root: ['/', 'https://SITE.test', '/#main', '/a']})
    crawler = make_orchestrator(crawler_config(), browser_manager, discoverer, site)

    result = await crawler.crawl('https://site.test', 3)

    assert result.start_url == root
    assert result.visited == [root, A]
    assert Counter(site.navigations) == {root: 1, A: 1}


@pytest.mark.asyncio
async def test_page_states_follow_crawl_steps(crawler_config, browser_manager, discoverer, make_site):
    site = make_site({A: [B, C]}, failing=[B])
    crawler = make_orchestrator(crawler_config(), browser_manager, discoverer, site)

    result = await crawler.crawl(A, 2)

    assert result.page_states[A] == [
        PageState.NAVIGATING, PageState.DISCOVERING, PageState.TRAVERSING, PageState.IDLE,
    ]
    assert result.page_states[B] == [PageState.NAVIGATING, PageState.IDLE]
    assert result.page_states[C][-1] is PageState.IDLE


@pytest.mark.asyncio
async def test_page_returns_to_idle_when_discovery_crashes(crawler_config, browser_manager, make_discoverer, make_site):
    site = make_site({A: []})
    crawler = make_orchestrator(crawler_config(), browser_manager, make_discoverer(broken_urls=[A]), site)

    result = await crawler.crawl(A, 1)

    assert result.page_states[A] == [PageState.NAVIGATING, PageState.DISCOVERING, PageState.IDLE]


@pytest.mark.asyncio
async def test_cancel_before_crawl_visits_nothing(crawler_config, browser_manager, discoverer, make_site):
    site = make_site({A: [B]})
    crawler = make_orchestrator(crawler_config(), browser_manager, discoverer, site)

    crawler.cancel()
    result = await crawler.crawl(A, 2)

    assert result.cancelled
    assert result.visited == []
    assert site.navigations == []
    assert browser_manager.setup_calls == 0


@pytest.mark.asyncio
async def test_cancel_before_crawl_propagates_to_external_event(crawler_config, browser_manager, discoverer, make_site):
    site = make_site({A: [B]})
    crawler = make_orchestrator(crawler_config(), browser_manager, discoverer, site)
    cancel_event = asyncio.Event()

    crawler.cancel()
    result = await crawler.crawl(A, 2, cancel_event=cancel_event)

    assert cancel_event.is_set()
    assert site.navigations == []
    assert result.cancelled
