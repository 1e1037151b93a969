"""PortProbe Test Suite

Test modules:
    test_port_parser  — core/port_parser.py specs, ranges, top-N
    test_targets      — target expansion and work-item enumeration
    test_config       — ScanConfig validation, durations, YAML loading
    test_aggregator   — result buffering, de-duplication, ordering, finalize
    test_prober       — connect outcomes and banner capture against localhost
    test_scanner      — scheduler: admission bound, ordering, cancellation
    test_progress     — progress cadence, deadlines, rate meter
    test_validators   — port / setting validation, banner sanitizing
    test_reporting    — JSON / TXT writers
    test_cli          — main.py argument handling and exit codes
    test_layering     — static import analysis (core / reporting separation)

Run all tests:
    pytest tests/ -v
"""
