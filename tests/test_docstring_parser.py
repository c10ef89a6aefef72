from toolbridge.utils.docstring_parser import parse_docstring


def test_google_style_sections():
    def annotated(order_id: int, note: str = "") -> dict:
        """查詢訂單
        並回傳明細。

        第二段不屬於摘要。

        Args:
            order_id (int): 訂單編號
            note: 備註，
                可以跨行
        Returns:
            dict，包含訂單明細
        Raises:
            KeyError: 找不到訂單
        """

    doc = parse_docstring(annotated)

    assert doc.summary == "查詢訂單 並回傳明細。"
    assert doc.parameter("order_id") == "訂單編號"
    assert doc.parameter("note") == "備註， 可以跨行"
    assert doc.parameter("missing") is None
    assert doc.returns == "dict，包含訂單明細"
    assert doc.raises == "KeyError: 找不到訂單"


def test_indented_colon_lines_stay_in_args():
    def sample(mode: str) -> None:
        """切換模式

        Args:
            mode: 模式名稱
                note: 只接受 fast 或 safe
        Example:
            sample("fast")
        """

    doc = parse_docstring(sample)

    assert doc.parameter("mode") == "模式名稱 note: 只接受 fast 或 safe"


def test_chinese_headers_and_no_docstring():
    def zh(a: int) -> int:
        """加一

        參數:
            a: 輸入值
        回傳: a + 1
        """

    def bare(a: int) -> int:
        return a

    doc = parse_docstring(zh)
    assert doc.parameter("a") == "輸入值"
    assert doc.returns == "a + 1"
    assert parse_docstring(bare) is None
