from render_service.__main__ import build_bind_options, parse_args


def test_numeric_port_binds_tcp():
    assert build_bind_options("0.0.0.0", "3002") == {"host": "0.0.0.0", "port": 3002}


def test_non_numeric_port_is_passed_through():
    """platform-provided pipe or socket names are not parsed"""
    pipe = r"\\.\pipe\a1b2c3"
    assert build_bind_options("0.0.0.0", pipe) == {"uds": pipe}
    assert build_bind_options("0.0.0.0", "/run/render.sock") == {"uds": "/run/render.sock"}


def test_cli_overrides():
    args = parse_args(["--port", "8080", "--temp-dir", "/tmp/renders", "--log-level", "DEBUG"])

    assert args.port == "8080"
    assert args.temp_dir == "/tmp/renders"
    assert args.log_level == "DEBUG"
