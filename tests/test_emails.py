from unittest.mock import MagicMock

import pytest
import requests

from emails import RESEND_URL, EmailError, EmailMessage, ResendMailer, contact_email


def make_response(status=200, body=None):
    resp = MagicMock()
    resp.ok = 200 <= status < 300
    resp.status_code = status
    resp.text = "error body"
    resp.json.return_value = body if body is not None else {"id": "msg_1"}
    return resp


def test_send_posts_to_resend():
    session = MagicMock()
    session.post.return_value = make_response()
    mailer = ResendMailer("re_key", session=session)

    msg = EmailMessage(sender="Shop <a@shop.test>", to=["b@shop.test"], subject="Hi", text="Body", reply_to="c@x.test")
    assert mailer.send(msg) == "msg_1"

    args, kwargs = session.post.call_args
    assert args[0] == RESEND_URL
    assert kwargs["headers"]["Authorization"] == "Bearer re_key"
    assert kwargs["json"] == {
        "from": "Shop <a@shop.test>",
        "to": ["b@shop.test"],
        "subject": "Hi",
        "text": "Body",
        "reply_to": "c@x.test",
    }


def test_send_raises_on_provider_error():
    session = MagicMock()
    session.post.return_value = make_response(status=422)
    with pytest.raises(EmailError):
        ResendMailer("re_key", session=session).send(EmailMessage("a", ["b"], "s", "t"))


def test_send_raises_on_transport_error():
    session = MagicMock()
    session.post.side_effect = requests.ConnectionError("down")
    with pytest.raises(EmailError):
        ResendMailer("re_key", session=session).send(EmailMessage("a", ["b"], "s", "t"))


def test_contact_email_template(settings):
    msg = contact_email(settings, "Ada", "ada@example.com", "A blue whale please")
    assert msg.to == ["owner@shop.test"]
    assert msg.reply_to == "ada@example.com"
    assert msg.sender == "Alyssa Loops <orders@shop.test>"
    assert msg.subject == "Custom Order Request — Ada"
    assert "Request:\nA blue whale please" in msg.text


@pytest.mark.parametrize("body", [["queued"], "queued", None])
def test_send_tolerates_non_object_body(body):
    session = MagicMock()
    resp = make_response()
    resp.json.return_value = body
    session.post.return_value = resp

    assert ResendMailer("re_key", session=session).send(EmailMessage("a", ["b"], "s", "t")) is None
