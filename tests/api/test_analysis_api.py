"""AI analysis endpoints and the reflection prompt"""
from api.prompts import REFLECTION_PROMPTS

MEDIA = "https://timelinetest.blob.core.windows.net/timeline-media/ada%40example.com/e1"


async def test_analyze_sentiment(client, auth_headers, analysis):
    response = await client.post(
        "/api/analyze-sentiment", json={"text": "Best day ever"}, headers=auth_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["sentiment"] == "positive"
    assert data["confidence"] == 0.9
    assert analysis.calls == [("sentiment", "Best day ever")]


async def test_analyze_sentiment_falls_back_when_service_down(client, auth_headers, analysis):
    analysis.fail = True

    response = await client.post(
        "/api/analyze-sentiment", json={"text": "Hmm"}, headers=auth_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["sentiment"] == "neutral"
    assert data["confidence"] == 0.5
    assert data["scores"] == {"positive": 0.33, "negative": 0.33, "neutral": 0.34}


async def test_empty_text_rejected(client, auth_headers, analysis):
    for path in ("/api/analyze-sentiment", "/api/categorize-text"):
        response = await client.post(path, json={"text": "  "}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Text is required"
    assert analysis.calls == []


async def test_categorize_text(client, auth_headers):
    response = await client.post(
        "/api/categorize-text", json={"text": "Birthday party"}, headers=auth_headers
    )

    assert response.status_code == 200
    assert response.json() == {"categories": ["celebration"]}


async def test_categorize_text_failure(client, auth_headers, analysis):
    analysis.fail = True

    response = await client.post(
        "/api/categorize-text", json={"text": "Birthday party"}, headers=auth_headers
    )

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to categorize text"


async def test_transcribe(client, auth_headers, analysis):
    url = f"{MEDIA}/memo.webm?sig=abc"

    response = await client.post(
        "/api/transcribe", json={"audioUrl": url}, headers=auth_headers
    )

    assert response.status_code == 200
    assert response.json()["text"] == "We had a party for my birthday"
    assert analysis.calls == [("transcribe_url", url)]


async def test_transcribe_requires_url(client, auth_headers):
    response = await client.post("/api/transcribe", json={}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Audio URL is required"


async def test_transcribe_only_fetches_our_own_media(client, auth_headers, analysis):
    """
    GIVEN audio URLs outside the media container
    WHEN asking for a transcription
    THEN the request is rejected before anything is fetched
    """
    for url in (
        "http://169.254.169.254/latest/meta-data",
        "https://timelinetest.blob.core.windows.net.evil.example/timeline-media/a.wav",
        "https://otheraccount.blob.core.windows.net/timeline-media/a.wav",
        "https://timelinetest.blob.core.windows.net/private/a.wav",
    ):
        response = await client.post(
            "/api/transcribe", json={"audioUrl": url}, headers=auth_headers
        )
        assert response.status_code == 400

    assert analysis.calls == []


async def test_transcribe_failure(client, auth_headers, analysis):
    analysis.fail = True

    response = await client.post(
        "/api/transcribe", json={"audioUrl": f"{MEDIA}/memo.wav"}, headers=auth_headers
    )

    assert response.status_code == 500


async def test_analyze_image(client, auth_headers):
    response = await client.post(
        "/api/analyze-image", json={"imageUrl": "https://x/cake.jpg"}, headers=auth_headers
    )

    assert response.status_code == 200
    assert response.json()["tags"] == ["cake", "people"]


async def test_analyze_image_never_fails(client, auth_headers, analysis):
    """
    GIVEN the vision service is down (or no URL is sent)
    WHEN tagging an image
    THEN the generic "image" tag is returned with 200
    """
    analysis.fail = True

    for body in ({"imageUrl": "https://x/cake.jpg"}, {}):
        response = await client.post("/api/analyze-image", json=body, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["tags"] == ["image"]
        assert response.json()["category"] == "general"


async def test_analysis_requires_authentication(client):
    response = await client.post("/api/analyze-sentiment", json={"text": "hi"})

    assert response.status_code == 401


async def test_generate_prompt_without_auth(client):
    response = await client.get("/api/generate-prompt")

    assert response.status_code == 200
    assert response.json()["prompt"] in REFLECTION_PROMPTS
