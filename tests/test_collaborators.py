"""
Tests for the HTTP collaborators, using httpx.MockTransport.
"""
import json

import httpx
import pytest

from claimcadence.collaborators import (
    ChatCompletionsTextGenerator,
    HttpDocumentClassifier,
    HttpMailSender,
    MailMessage,
    Recipient,
)
from claimcadence.exceptions import ClassificationError, MailDeliveryError, TextGenerationError


def mock_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def raise_connect_error(request):
    raise httpx.ConnectError("connection refused", request=request)


class TestHttpMailSender:
    """Tests for the send-email collaborator."""

    def test_payload_shape(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"ok": True})

        sender = HttpMailSender("https://crm.example/send-email", client=mock_client(handler))
        sender.send(
            MailMessage(
                claim_id="claim-1",
                subject="CLM-1001",
                body="Hello",
                recipients=[Recipient(email="a@b.example", name="Alex", type="follow_up")],
                claim_email_cc="claim-ho123@claims.example.com",
            )
        )

        assert seen[0] == {
            "recipients": [{"email": "a@b.example", "name": "Alex", "type": "follow_up"}],
            "subject": "CLM-1001",
            "body": "Hello",
            "claimId": "claim-1",
            "claimEmailCc": "claim-ho123@claims.example.com",
        }

    def test_cc_omitted_when_absent(self):
        message = MailMessage(claim_id="c", subject="s", body="b", recipients=[Recipient(email="x@y.z")])
        assert "claimEmailCc" not in message.to_payload()
        assert message.to_payload()["recipients"] == [{"email": "x@y.z"}]

    def test_http_error(self):
        sender = HttpMailSender(
            "https://crm.example/send-email",
            client=mock_client(lambda request: httpx.Response(502, text="bad gateway")),
        )
        with pytest.raises(MailDeliveryError) as exc:
            sender.send(MailMessage(claim_id="claim-1", subject="s", body="b"))
        assert exc.value.claim_id == "claim-1"
        assert "502" in exc.value.message

    def test_unreachable(self):
        sender = HttpMailSender("https://crm.example/send-email", client=mock_client(raise_connect_error))
        with pytest.raises(MailDeliveryError):
            sender.send(MailMessage(claim_id="claim-1", subject="s", body="b"))


class TestChatCompletionsTextGenerator:
    """Tests for the AI text collaborator."""

    def test_returns_first_choice(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200, json={"choices": [{"message": {"content": "  Hi there.  "}}]}
            )

        generator = ChatCompletionsTextGenerator(
            "https://ai.example/v1/", "key", model="small", client=mock_client(handler)
        )

        assert generator.generate("system", "user") == "Hi there."
        assert str(seen[0].url) == "https://ai.example/v1/chat/completions"
        body = json.loads(seen[0].content)
        assert body["model"] == "small"
        assert [m["role"] for m in body["messages"]] == ["system", "user"]

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(500, text="down"),
            httpx.Response(200, json={"choices": []}),
            httpx.Response(200, json={"choices": [{"message": {"content": "   "}}]}),
            httpx.Response(200, text="not json"),
        ],
    )
    def test_failures_raise(self, response):
        generator = ChatCompletionsTextGenerator(
            "https://ai.example/v1", "key", client=mock_client(lambda request: response)
        )
        with pytest.raises(TextGenerationError):
            generator.generate("system", "user")


class TestHttpDocumentClassifier:
    """Tests for the classification collaborator."""

    def test_classification(self):
        def handler(request):
            assert json.loads(request.content) == {"fileId": "f1"}
            return httpx.Response(
                200, json={"classification": "estimate", "confidence": 0.8, "pages": 2}
            )

        classifier = HttpDocumentClassifier("https://docs.example/classify", client=mock_client(handler))
        result = classifier.classify("f1")

        assert result.label == "estimate"
        assert result.confidence == 0.8
        assert result.metadata == {"pages": 2}

    def test_missing_label(self):
        classifier = HttpDocumentClassifier(
            "https://docs.example/classify",
            client=mock_client(lambda request: httpx.Response(200, json={"confidence": 0.5})),
        )
        with pytest.raises(ClassificationError):
            classifier.classify("f1")

    def test_unreachable(self):
        classifier = HttpDocumentClassifier(
            "https://docs.example/classify", client=mock_client(raise_connect_error)
        )
        with pytest.raises(ClassificationError) as exc:
            classifier.classify("f1")
        assert exc.value.details == {"file_id": "f1"}
