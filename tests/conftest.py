"""
测试全局 conftest.py
"""
import sys
import os

import pytest

# 确保项目根目录在 sys.path 最前面
_project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from core.context import action_store_var, request_store_var, trace_id_var  # noqa: E402


@pytest.fixture(autouse=True)
def clean_context():
    """每个测试前后确保请求/动作上下文为空"""
    tokens = [
        (request_store_var, request_store_var.set(None)),
        (action_store_var, action_store_var.set(None)),
        (trace_id_var, trace_id_var.set("-")),
    ]
    yield
    for var, token in reversed(tokens):
        var.reset(token)
