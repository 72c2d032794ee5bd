import peerlink


def test_public_api_drives_a_link(clock):
    table = peerlink.PeerTable(peerlink.MonitorSettings(), clock=clock)
    link = table.open_link("10.0.0.9", 6112, 3, "carol", peerlink.Offerer.REMOTE)
    assert isinstance(link, peerlink.PeerLink)
    table.mark_connected(3)
    table.record_latency(3, 40)

    seen = []
    monitor = peerlink.LinkMonitor(table.settings, table, on_quiet=seen.append)
    clock.advance(5001)
    monitor.check_once()
    assert seen == [link]
