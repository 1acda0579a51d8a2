"""Single-page browser UI served at the root path."""

INDEX_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Shopping History Analyzer</title>
    <style>
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem; }
      section { margin-bottom: 2rem; max-width: 720px; }
      input, textarea { padding: 0.4rem 0.6rem; margin: 0.2rem 0; }
      button { padding: 0.4rem 0.8rem; margin-right: 0.5rem; }
      .error { color: #b91c1c; }
      img.thumb { max-height: 48px; }
      #preview { max-height: 240px; display: block; margin: 0.5rem 0; }
      table { border-collapse: collapse; width: 100%; }
      td, th { border-bottom: 1px solid #ddd; padding: 0.3rem; text-align: left; }
    </style>
  </head>
  <body>
    <h1>Shopping History Analyzer</h1>
    <p id="error" class="error"></p>

    <section>
      <h2>Add New Record</h2>
      <input id="file" type="file" accept="image/*" onchange="scan()" />
      <p id="scanning" hidden>Reading the image...</p>
      <form id="confirm" hidden onsubmit="confirmRecord(event)">
        <img id="preview" alt="Preview" />
        <label>Product Name <input id="name" required /></label><br />
        <label>Price <input id="price" type="number" step="0.01" min="0" required /></label><br />
        <button type="button" id="locate" onclick="locate()">Add Current Location</button>
        <span id="coords"></span><br />
        <button type="submit">Add Record</button>
        <button type="button" onclick="cancelScan()">Cancel</button>
      </form>
    </section>

    <section>
      <h2>Ask About Your History</h2>
      <form onsubmit="analyze(event)">
        <textarea id="query" rows="3" cols="60"
          placeholder="e.g., How much did I spend on snacks last week?"></textarea><br />
        <button id="analyze" type="submit">Analyze</button>
      </form>
      <pre id="answer"></pre>
    </section>

    <section>
      <h2>Shopping History</h2>
      <input id="search" placeholder="Search by product name..." oninput="refresh()" />
      <input id="date" type="date" onchange="refresh()" />
      <table>
        <thead><tr><th></th><th>Product</th><th>Price</th><th>Date</th><th></th></tr></thead>
        <tbody id="history"></tbody>
      </table>
    </section>

    <script>
      let draft = null;
      let position = null;
      const $ = (id) => document.getElementById(id);

      function showError(message) { $('error').textContent = message || ''; }

      async function readError(res) {
        try { return (await res.json()).detail || ('Error: ' + res.status); }
        catch (e) { return 'Error: ' + res.status; }
      }

      function resetForm() {
        draft = null;
        position = null;
        $('confirm').hidden = true;
        $('file').value = '';
        $('coords').textContent = '';
        $('locate').disabled = false;
      }

      async function scan() {
        const file = $('file').files[0];
        if (!file) return;
        resetForm();
        showError('');
        $('file').disabled = true;
        $('scanning').hidden = false;
        const body = new FormData();
        body.append('file', file);
        try {
          const res = await fetch('/scans', { method: 'POST', body });
          if (!res.ok) { showError(await readError(res)); resetForm(); return; }
          draft = await res.json();
          $('preview').src = draft.imageUrl;
          $('name').value = draft.productName;
          $('price').value = draft.price;
          $('confirm').hidden = false;
        } finally {
          $('file').disabled = false;
          $('scanning').hidden = true;
        }
      }

      function locate() {
        if (!navigator.geolocation) {
          showError('Geolocation is not supported by this browser.');
          return;
        }
        navigator.geolocation.getCurrentPosition(
          (pos) => {
            position = { latitude: pos.coords.latitude, longitude: pos.coords.longitude };
            $('coords').textContent =
              '(' + position.latitude.toFixed(2) + ', ' + position.longitude.toFixed(2) + ')';
            $('locate').disabled = true;
          },
          () => showError('Could not get location. Please ensure location services are enabled.')
        );
      }

      async function confirmRecord(event) {
        event.preventDefault();
        if (!draft) return;
        const res = await fetch('/records', {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify({
            draftId: draft.id,
            name: $('name').value,
            price: parseFloat($('price').value),
            location: position,
          }),
        });
        if (!res.ok) { showError(await readError(res)); return; }
        const data = await res.json();
        resetForm();
        showError(data.warning);
        refresh();
      }

      async function cancelScan() {
        if (draft) await fetch('/scans/' + draft.id, { method: 'DELETE' });
        resetForm();
        showError('');
      }

      async function removeRecord(id) {
        const res = await fetch('/records/' + encodeURIComponent(id), { method: 'DELETE' });
        if (!res.ok) { showError(await readError(res)); return; }
        showError((await res.json()).warning);
        refresh();
      }

      async function refresh() {
        const params = new URLSearchParams({ search: $('search').value, date: $('date').value });
        const res = await fetch('/records?' + params);
        if (!res.ok) { showError(await readError(res)); return; }
        const data = await res.json();
        const rows = $('history');
        rows.innerHTML = '';
        for (const record of data.records) {
          const row = rows.insertRow();
          const img = document.createElement('img');
          img.src = record.imageUrl;
          img.className = 'thumb';
          row.insertCell().appendChild(img);
          row.insertCell().textContent = record.name;
          row.insertCell().textContent = record.price.toFixed(2);
          row.insertCell().textContent = new Date(record.date).toLocaleString();
          const button = document.createElement('button');
          button.textContent = 'Delete';
          button.onclick = () => removeRecord(record.id);
          row.insertCell().appendChild(button);
        }
        $('analyze').disabled = data.total === 0 && !$('search').value && !$('date').value;
      }

      async function analyze(event) {
        event.preventDefault();
        const query = $('query').value;
        if (!query.trim()) return;
        $('analyze').disabled = true;
        $('query').disabled = true;
        $('answer').textContent = 'Analyzing...';
        showError('');
        try {
          const res = await fetch('/analysis', {
            method: 'POST',
            headers: { 'Content-Type': 'application/json' },
            body: JSON.stringify({ query }),
          });
          if (!res.ok) { $('answer').textContent = ''; showError(await readError(res)); return; }
          $('answer').textContent = (await res.json()).answer || '';
        } finally {
          $('analyze').disabled = false;
          $('query').disabled = false;
        }
      }

      refresh();
    </script>
  </body>
</html>
"""
