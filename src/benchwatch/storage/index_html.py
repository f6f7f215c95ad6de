"""Default dashboard page written next to data.js.

The page loads data.js as a script and draws one chart per benchmark
of every suite.
"""

from __future__ import annotations

DEFAULT_INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, minimum-scale=1.0, initial-scale=1, user-scalable=yes" />
    <title>Benchmarks</title>
    <style>
      html { font-family: BlinkMacSystemFont, -apple-system, "Segoe UI", Roboto, sans-serif; color: #333; }
      body { margin: 0; }
      header { padding: 16px 32px; background: #f4f4f4; display: flex; justify-content: space-between; }
      main { padding: 0 32px 32px; }
      .suite { margin-top: 32px; }
      .charts { display: flex; flex-wrap: wrap; }
      .chart { width: 600px; max-width: 100%; margin: 16px; }
      footer { padding: 16px 32px; font-size: 12px; color: #888; }
    </style>
  </head>
  <body>
    <header>
      <div>
        <strong>Last Update:</strong> <span id="last-update"></span>
      </div>
      <div>
        <strong>Repository:</strong> <a id="repository-link" rel="noopener"></a>
      </div>
    </header>
    <main id="main"></main>
    <footer>
      <button id="dl-button">Download data as JSON</button>
    </footer>

    <script src="https://cdn.jsdelivr.net/npm/chart.js@2.9.2/dist/Chart.min.js"></script>
    <script src="data.js"></script>
    <script id="main-script">
      'use strict';
      (function() {
        const data = window.BENCHMARK_DATA;

        document.getElementById('last-update').textContent = new Date(data.lastUpdate).toString();
        const repoLink = document.getElementById('repository-link');
        repoLink.href = data.repoUrl;
        repoLink.textContent = data.repoUrl;

        document.getElementById('dl-button').onclick = () => {
          const dataUrl = 'data:,' + JSON.stringify(data, null, 2);
          const a = document.createElement('a');
          a.href = dataUrl;
          a.download = 'benchmark_data.json';
          a.click();
        };

        function collectBenchesPerTestCase(entries) {
          const map = new Map();
          for (const entry of entries) {
            const {commit, date, tool, benches} = entry;
            for (const bench of benches) {
              const result = {commit, date, tool, bench};
              const arr = map.get(bench.name);
              if (arr === undefined) {
                map.set(bench.name, [result]);
              } else {
                arr.push(result);
              }
            }
          }
          return map;
        }

        function renderGraph(parent, name, dataset) {
          const canvas = document.createElement('canvas');
          canvas.className = 'chart';
          parent.appendChild(canvas);

          const chartData = {
            labels: dataset.map(d => d.commit.id.slice(0, 7)),
            datasets: [
              {
                label: name,
                data: dataset.map(d => d.bench.value),
                borderColor: '#dea584',
                backgroundColor: '#dea58460',
              },
            ],
          };
          const options = {
            scales: {
              yAxes: [
                {
                  scaleLabel: {
                    display: true,
                    labelString: dataset.length > 0 ? dataset[0].bench.unit : '',
                  },
                  ticks: { beginAtZero: true },
                },
              ],
            },
            onClick: (_mouseEvent, activeElems) => {
              if (activeElems.length === 0) {
                return;
              }
              const url = dataset[activeElems[0]._index].commit.url;
              if (url) {
                window.open(url, '_blank');
              }
            },
          };

          new Chart(canvas, {type: 'line', data: chartData, options});
        }

        const main = document.getElementById('main');
        for (const [name, entries] of Object.entries(data.entries)) {
          const section = document.createElement('div');
          section.className = 'suite';
          const title = document.createElement('h1');
          title.textContent = name;
          section.appendChild(title);
          const charts = document.createElement('div');
          charts.className = 'charts';
          section.appendChild(charts);
          main.appendChild(section);

          for (const [benchName, dataset] of collectBenchesPerTestCase(entries).entries()) {
            renderGraph(charts, benchName, dataset);
          }
        }
      })();
    </script>
  </body>
</html>
"""
