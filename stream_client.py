"""
Streaming test client for the Audio2Face server.

Decodes an audio file, streams it to /ws as PCM16 chunks at the
negotiated input sample rate and prints jaw openness per frame.

Usage:
    python stream_client.py speech.wav [--url ws://localhost:8080/ws] [--chunk-ms 100]
"""

import argparse
import asyncio
import base64
import json
import sys

import librosa
import numpy as np
import websockets

SERVER_URL = "ws://localhost:8080/ws"
CHUNK_MS = 100


def to_pcm16(samples: np.ndarray) -> bytes:
    """Convert float samples in [-1, 1] to little-endian PCM16 bytes."""
    clipped = np.clip(samples, -1.0, 1.0)
    return (clipped * 32767).astype("<i2").tobytes()


async def receive_frames(websocket, expected: int):
    """Print one line per frame until the expected number has arrived."""
    received = 0
    while received < expected:
        message = await websocket.recv()
        data = json.loads(message)
        msg_type = data.get("type")

        if msg_type == "frame":
            received += 1
            weights = {bs["name"]: bs["value"] for bs in data["blendshapes"]}
            bars = "|" * int(data["jaw"] * 40)
            print(
                f"\r[FRAME {data['frameIndex']:>4}] jaw={data['jaw']:.3f} "
                f"jawOpen={weights.get('jawOpen', 0.0):.3f} {bars:<40}",
                end="",
                flush=True,
            )
        elif msg_type == "error":
            received += 1
            print(f"\n[SERVER ERROR] {data.get('message')}")
    print()


async def run_client(path: str, url: str, chunk_ms: int):
    print(f"Connecting to {url}...")
    async with websockets.connect(url) as websocket:
        config = json.loads(await websocket.recv())
        input_rate = config.get("audio", {}).get("inputSampleRate", 24000)
        print(f"Connected! Server expects PCM16 at {input_rate}Hz (backend: {config.get('backend')})")

        samples, _ = librosa.load(path, sr=input_rate, mono=True)
        chunk_size = max(1, input_rate * chunk_ms // 1000)
        chunks = [samples[i:i + chunk_size] for i in range(0, len(samples), chunk_size)]
        print(f"Streaming {len(samples)} samples in {len(chunks)} chunks of {chunk_ms}ms")

        receiver = asyncio.create_task(receive_frames(websocket, len(chunks)))
        for chunk in chunks:
            await websocket.send(json.dumps({
                "type": "audio",
                "data": base64.b64encode(to_pcm16(chunk)).decode("utf-8"),
            }))
            # Pace like a live microphone
            await asyncio.sleep(chunk_ms / 1000)

        await receiver


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Stream an audio file to the Audio2Face server")
    parser.add_argument("path", help="Audio file to stream")
    parser.add_argument("--url", default=SERVER_URL)
    parser.add_argument("--chunk-ms", type=int, default=CHUNK_MS)
    args = parser.parse_args()

    try:
        if sys.platform == "win32":
            asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
        asyncio.run(run_client(args.path, args.url, args.chunk_ms))
    except KeyboardInterrupt:
        pass
