"""
Browser test page.

A single form that posts to /upload and shows the returned link.
"""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["Pages"])

UPLOAD_PAGE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Temp File Uploader</title>
  <style>
    body { font-family: Arial, sans-serif; max-width: 600px; margin: 50px auto; padding: 20px; }
    .upload-box { border: 2px dashed #ccc; padding: 40px; text-align: center; border-radius: 8px; }
    input[type="file"] { margin: 20px 0; }
    button { background: #0366d6; color: white; border: none; padding: 10px 20px; border-radius: 5px; cursor: pointer; }
    button:hover { background: #0256c7; }
    .result { margin-top: 20px; padding: 15px; background: #f6f8fa; border-radius: 5px; }
    .link { color: #0366d6; word-break: break-all; }
  </style>
</head>
<body>
  <h1>Temp File Uploader</h1>
  <p>Uploaded files are kept for 24 hours.</p>

  <div class="upload-box">
    <input type="file" id="fileInput" />
    <br>
    <button onclick="uploadFile()">Upload File</button>
  </div>

  <div id="result"></div>

  <script>
    async function uploadFile() {
      const fileInput = document.getElementById('fileInput');
      const resultDiv = document.getElementById('result');

      if (!fileInput.files[0]) {
        alert('Choose a file first!');
        return;
      }

      const formData = new FormData();
      formData.append('file', fileInput.files[0]);
      resultDiv.innerHTML = '<p>Uploading...</p>';

      try {
        const response = await fetch('/upload', { method: 'POST', body: formData });
        const data = await response.json();

        if (response.ok) {
          resultDiv.innerHTML = `
            <div class="result">
              <h3>Upload complete</h3>
              <p><strong>File:</strong> ${data.fileName}</p>
              <p><strong>Size:</strong> ${(data.size / 1024).toFixed(2)} KB</p>
              <p><strong>Expires:</strong> ${new Date(data.expiresAt).toLocaleString()}</p>
              <p><strong>Link:</strong><br>
              <a href="${data.url}" target="_blank" class="link">${data.url}</a></p>
            </div>`;
        } else {
          resultDiv.innerHTML = `<div class="result">Error: ${data.error.message}</div>`;
        }
      } catch (error) {
        resultDiv.innerHTML = `<div class="result">Error: ${error.message}</div>`;
      }
    }
  </script>
</body>
</html>
"""


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def upload_page():
    """Interactive upload form."""
    return UPLOAD_PAGE
